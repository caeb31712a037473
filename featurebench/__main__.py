"""
Command-line sweep - runs every valid detector/descriptor pair and writes
the CSV report plus a JSON summary

Usage:
    python -m featurebench [config.yaml] [report.csv]
"""

import sys
from pathlib import Path

from featurebench.config import load_config
from featurebench.core import SweepHarness
from featurebench.utils.io_handler import CSVReportWriter, JSONWriter
from featurebench.utils.logger import setup_logger, create_session_log_file
from featurebench.utils.visualization import MatchVisualizer


def print_summary(result):
    """Print one line per combination."""
    print("\n" + "=" * 78)
    print(f"{'Detector':<10} {'Descriptor':<10} {'Keypoints':>10} {'Det ms':>10} "
          f"{'Desc ms':>10} {'Matches':>10} {'Pairs':>8}")
    print("=" * 78)
    for entry in result.summary():
        print(f"{entry['detector']:<10} {entry['descriptor']:<10} "
              f"{entry['keypoints']['mean']:>10.1f} {entry['detection_ms']['mean']:>10.2f} "
              f"{entry['description_ms']['mean']:>10.2f} {entry['matches']['mean']:>10.1f} "
              f"{entry['frame_pairs']:>8}")
    print("=" * 78)
    for detector, descriptor, reason in result.skipped:
        print(f"[SKIP] {detector}/{descriptor}: {reason}")
    for detector, descriptor, error in result.failed:
        print(f"[FAIL] {detector}/{descriptor}: {error}")


def main(argv=None):
    """Run the full sweep."""
    argv = sys.argv[1:] if argv is None else argv
    
    config_path = argv[0] if len(argv) > 0 else None
    config = load_config(config_path)
    report_path = argv[1] if len(argv) > 1 else config['output']['report_path']
    
    logger = setup_logger('featurebench', log_file=create_session_log_file())
    logger.info(f"Writing report to {report_path}")
    
    visualizer = MatchVisualizer() if config['output'].get('visualize') else None
    
    with CSVReportWriter(report_path, title="Detector/descriptor sweep results") as report:
        harness = SweepHarness(config, report_sink=report, visualizer=visualizer)
        result = harness.run()

    if visualizer is not None:
        visualizer.close()

    summary_path = config['output'].get('summary_path') or str(Path(report_path).with_suffix('.json'))
    JSONWriter.save_results(result.to_dict(), summary_path)
    logger.info(f"Summary saved to {summary_path}")
    
    print_summary(result)
    return 0 if result.rows else 1


if __name__ == "__main__":
    sys.exit(main())
