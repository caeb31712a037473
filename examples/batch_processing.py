"""Sweep a subset of combinations and save the report."""

from featurebench.config import load_config, merge_config
from featurebench.core import SweepHarness
from featurebench.utils.io_handler import CSVReportWriter, JSONWriter
from featurebench.utils.logger import setup_logger


def main():
    """Compare corner detectors against binary descriptors."""
    logger = setup_logger('batch_sweep')
    
    config = merge_config(load_config(), {
        "sweep": {
            "detectors": ["SHITOMASI", "HARRIS", "FAST"],
            "descriptors": ["BRISK", "BRIEF", "ORB"]
        },
        "matching": {"selector_type": "SEL_NN"}
    })
    
    with CSVReportWriter("output/corner_sweep.csv") as report:
        result = SweepHarness(config, report_sink=report).run()
    
    JSONWriter.save_results(result.to_dict(), "output/corner_sweep.json")
    logger.info(f"Sweep complete: {len(result.rows)} rows")


if __name__ == "__main__":
    main()
