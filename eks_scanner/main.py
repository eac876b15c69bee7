# main.py
"""
CLI entrypoint for the scanner.

- Supports two modes:
  * dummy: read AWS Config configuration items / change notifications from a JSON file
  * aws: describe live EKS clusters and node groups using boto3.Session
- Policies come from --policy, then $EKS_SCANNER_POLICY_FILE, then the built-in defaults.
- Produces JSON, CSV, and HTML reports and prints a colorful summary table.
"""

import argparse
import logging
import os

import boto3

from eks_scanner.aws_eks import scan_all_eks_live
from eks_scanner.config import DEFAULT_AWS_REGION, DEFAULT_REPORT_DIR, ENV_AWS_REGION, ENV_POLICY_FILE, ENV_REPORT_DIR
from eks_scanner.engine import scan_snapshots
from eks_scanner.policy import PolicySet, default_policy_set, load_policy_set
from eks_scanner.snapshots import snapshots_from_json
from eks_scanner.utils import load_json_file, print_summary_and_report_path, save_report

logger = logging.getLogger("eks_scanner")


def resolve_policy_set(policy_path: str = None) -> PolicySet:
    """
    Resolve policy file: CLI -> env -> built-in defaults.
    """
    policy_path = policy_path or os.environ.get(ENV_POLICY_FILE)
    if policy_path:
        logger.info("Loading policies from %s", policy_path)
        return load_policy_set(policy_path)
    logger.info("Using built-in default policies")
    return default_policy_set()


def run_dummy(file_path: str, policy_set: PolicySet, report_dir: str = DEFAULT_REPORT_DIR,
              print_table: bool = False):
    """
    Run the scanner in dummy mode using a local JSON file of configuration items.
    No AWS access is required in this mode.
    """
    logger.info("Running in dummy mode using file: %s", file_path)
    snapshots = snapshots_from_json(load_json_file(file_path))
    results, findings = scan_snapshots(snapshots, policy_set)
    report_paths = save_report(
        findings,
        mode="dummy",
        extra={"source_file": file_path},
        out_dir=report_dir,
        results=results,
    )
    print_summary_and_report_path(
        findings, report_paths, print_full_table=print_table
    )
    return results, findings


def run_aws(policy_set: PolicySet, profile: str = None, region: str = None,
            report_dir: str = DEFAULT_REPORT_DIR, print_table: bool = False):
    """
    Run the scanner against a live AWS account.

    Credential model:
    - AWS Vault (or similar) injects temporary credentials via environment variables.
    - This function does NOT require a profile name; it only needs a region.
    """
    # Resolve region: CLI -> env -> config default
    region = region or os.environ.get(ENV_AWS_REGION) or DEFAULT_AWS_REGION

    logger.info("Running in live AWS mode (region=%s)", region)

    # Credentials are expected to come from the environment
    # (e.g., via `aws-vault exec scanner-user -- eks-scanner --mode aws`).
    session = boto3.Session(region_name=region)

    results, findings = scan_all_eks_live(session, policy_set)
    report_paths = save_report(
        findings,
        mode="aws",
        extra={"region": region},
        out_dir=report_dir,
        results=results,
    )
    print_summary_and_report_path(
        findings, report_paths, print_full_table=print_table
    )
    return results, findings


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="EKS cluster and node group policy scanner."
    )
    p.add_argument(
        "--mode",
        choices=["dummy", "aws"],
        required=True,
        help="Run mode: dummy (JSON configuration items) or aws (live)",
    )
    p.add_argument(
        "--file",
        help="Path to JSON file of configuration items (required for dummy mode)",
    )
    p.add_argument(
        "--policy",
        help=f"Path to JSON policy document (default: ${ENV_POLICY_FILE} or built-in policies)",
    )
    p.add_argument(
        "--profile",
        help="AWS profile name (optional for aws mode, currently ignored when using AWS Vault)",
    )
    p.add_argument(
        "--region",
        help="AWS region (optional)",
    )
    p.add_argument(
        "--report-dir",
        default=os.environ.get(ENV_REPORT_DIR, DEFAULT_REPORT_DIR),
        help="Directory to save reports (default: reports)",
    )
    p.add_argument(
        "--print-table",
        action="store_true",
        help="Print full findings table to stdout",
    )
    p.add_argument(
        "--fail-on-violation",
        action="store_true",
        help="Exit with status 1 when any resource is vulnerable",
    )
    return p.parse_args(argv)


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    policy_set = resolve_policy_set(args.policy)
    if args.mode == "dummy":
        if not args.file:
            raise SystemExit("dummy mode requires --file path to JSON")
        results, _ = run_dummy(
            args.file,
            policy_set,
            report_dir=args.report_dir,
            print_table=args.print_table,
        )
    else:
        # `profile` argument is accepted for compatibility, but not used
        results, _ = run_aws(
            policy_set,
            profile=args.profile,
            region=args.region,
            report_dir=args.report_dir,
            print_table=args.print_table,
        )
    if args.fail_on_violation and any(result.vulnerable for _, result in results):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
