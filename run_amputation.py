from multiprocessing import Pool
import os
import logging
from tqdm import tqdm
import pandas as pd
from itertools import product
from src.pipeline.amputation.config import load_config
from src.pipeline.amputation.simulator import AmputationStudy, METRIC_COLS
from src.pipeline.amputation.evaluator import stable_std
from numpy.random import default_rng

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('amputation.log.txt'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger()


def build_param_suffix(n, p, prop, mechanism, continuous, type_):
    return f'n_{n}_p_{p}_prop_{prop}_mech_{mechanism}_cont_{int(continuous)}_type_{type_ or "none"}'


def run_single_combination(args):
    """Run all runs of one parameter combination. Used for parallelization across combinations."""
    param_set, num_runs, by_cases, correlation, run_rng = args
    n, p, prop, mechanism, continuous, type_ = param_set
    param_suffix = build_param_suffix(n, p, prop, mechanism, continuous, type_)

    scenario = {'proportion': prop, 'mechanism': mechanism, 'continuous': continuous, 'by_cases': by_cases}
    if type_ is not None:
        scenario['type'] = type_

    study = AmputationStudy(n=n, p=p, num_runs=num_runs, correlation=correlation, rng=run_rng)
    logger.info(f"Running amputation study for param_set: {param_suffix}")
    results = study.run_all({param_suffix: scenario})
    results = results.assign(n=n, p=p, prop=prop, mechanism=mechanism, continuous=continuous,
                             type=type_ or 'none', by_cases=by_cases)
    return results.drop(columns=['scenario'])


def expand_grid(n, p, prop, mechanism, continuous, type_):
    """Full factorial design; type only varies where the logistic model uses it."""
    combos = []
    for n_i, p_i, prop_i, mech_i, cont_i, type_i in product(n, p, prop, mechanism, continuous, type_):
        if mech_i == 'MCAR' or not cont_i:
            type_i = None
        combos.append((n_i, p_i, prop_i, mech_i, cont_i, type_i))
    return list(dict.fromkeys(combos))


def run_amputation(
    config_file=None,
    n=[200],
    p=[4],
    num_runs=5,
    prop=[0.5],
    mechanism=['MAR'],
    continuous=[True],
    type_=['RIGHT'],
    by_cases=True,
    correlation=0.5,
    seed=123,
    output_dir='results/amputation',
    n_jobs=None
):
    """
    Run an amputation study with full factorial design.

    Parameters can be provided either via a JSON config file or directly as function arguments.
    If config_file is provided, it takes precedence over direct arguments.

    Parameters:
    -----------
    config_file : str or Path, optional
        Path to JSON configuration file. If provided, other design parameters are ignored.
    n : list, default=[200]
        List of sample sizes
    p : list, default=[4]
        List of numbers of variables
    num_runs : int, default=5
        Number of runs per parameter combination
    prop : list, default=[0.5]
        List of proportions of missingness
    mechanism : list, default=['MAR']
        List of mechanisms (MCAR, MAR, MNAR)
    continuous : list, default=[True]
        List of flags for logistic (True) or odds based (False) probabilities
    type_ : list, default=['RIGHT']
        List of logistic types (LEFT, MID, TAIL, RIGHT)
    by_cases : bool, default=True
        Whether prop refers to cases or cells
    correlation : float, default=0.5
        Correlation between the generated variables
    seed : int, default=123
        Random seed
    output_dir : str, default='results/amputation'
        Root directory of the report
    n_jobs : int, optional
        Number of processes; defaults to NUM_PROCESSES or min(cpu_count, 4)

    Returns:
    --------
    results_all : DataFrame
        Metrics of every run
    results_averaged : DataFrame
        Metrics averaged across runs, with their across-run standard deviation

    Example:
    --------
    results_all, results_avg = run_amputation(config_file='config.json')
    results_all, results_avg = run_amputation(prop=[0.3, 0.6], mechanism=['MAR', 'MNAR'], num_runs=10)
    """
    if config_file is not None:
        config = load_config(config_file)
        n = config['n']
        p = config['p']
        num_runs = config['num_runs']
        prop = config['prop']
        mechanism = config['mechanism']
        continuous = config['continuous']
        type_ = config['type']
        by_cases = config['by_cases']
        correlation = config['correlation']
        seed = config['seed']

    logger.info(f"Starting full factorial amputation study with seed={seed}")

    param_combinations = expand_grid(n, p, prop, mechanism, continuous, type_)
    parent_rng = default_rng(seed)
    child_rngs = parent_rng.spawn(len(param_combinations))
    args_list = [(param_set, num_runs, by_cases, correlation, child_rng)
                 for param_set, child_rng in zip(param_combinations, child_rngs)]

    if n_jobs is None:
        n_jobs = int(os.environ.get('NUM_PROCESSES', min(os.cpu_count() or 4, 4)))

    if len(args_list) == 1 or n_jobs == 1:
        run_results = [run_single_combination(args) for args in tqdm(args_list, desc="Parameter Combinations")]
    else:
        logger.info(f"Using {n_jobs} parallel processes for {len(args_list)} parameter combinations")
        with Pool(processes=n_jobs) as pool:
            run_results = list(tqdm(pool.imap(run_single_combination, args_list), total=len(args_list), desc="Parameter Combinations"))

    results_all = pd.concat(run_results, ignore_index=True)

    param_base = (f'n_{min(n)}_{max(n)}_p_{min(p)}_{max(p)}_runs_{num_runs}_'
                  f'prop_{min(prop)}_{max(prop)}_mech_{"-".join(mechanism)}')
    report_dir = os.path.join(output_dir, param_base)
    os.makedirs(report_dir, exist_ok=True)

    results_all.to_csv(os.path.join(report_dir, 'results_all_runs.csv'), index=False)
    logger.info(f"Saved all runs results to {os.path.join(report_dir, 'results_all_runs.csv')}")

    groupby_keys = ['n', 'p', 'prop', 'mechanism', 'continuous', 'type', 'by_cases']
    grouped = results_all.groupby(groupby_keys, sort=False)
    results_mean = grouped[['target_prop'] + METRIC_COLS].mean().reset_index()
    results_std_runs = grouped[METRIC_COLS].agg(lambda col: stable_std(col, ddof=1)).reset_index()
    results_std_runs = results_std_runs.rename(columns={col: f'{col}_std_runs' for col in METRIC_COLS})
    results_averaged = pd.merge(results_mean, results_std_runs, on=groupby_keys, how='left')

    results_averaged.to_csv(os.path.join(report_dir, 'results_averaged.csv'), index=False)
    logger.info(f"Saved averaged results to {os.path.join(report_dir, 'results_averaged.csv')}")

    logger.info(f"Amputation study complete. Results saved in {report_dir}")
    return results_all, results_averaged


if __name__ == "__main__":
    results_all, results_averaged = run_amputation(
        num_runs=5, n=[200], p=[4], prop=[0.3, 0.5],
        mechanism=['MCAR', 'MAR', 'MNAR'], continuous=[True, False],
        type_=['RIGHT', 'MID'], seed=123
    )
    print(results_averaged)
