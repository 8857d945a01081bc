import argparse
import json
from collections.abc import Sequence

from fairness.config.settings import Settings
from fairness.database.connection import close_pool, init_pool
from fairness.logging.logger import Log
from fairness.processor.models import ProcessingType
from fairness.service.bias_reduction_service import BiasReductionService, build_service
from fairness.service.models import OperationResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="endorsements",
        description="Bias reduction and reviewer consistency operations.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Process one endorsement text")
    process.add_argument("endorsement_id")
    process.add_argument("text")
    process.add_argument(
        "--type",
        dest="processing_type",
        default=ProcessingType.FULL_PIPELINE.value,
        choices=[member.value for member in ProcessingType],
    )

    batch = commands.add_parser("batch", help="Process stored endorsements by id")
    batch.add_argument("endorsement_ids", nargs="+")

    consistency = commands.add_parser("consistency", help="Analyze a reviewer's ratings")
    consistency.add_argument("reviewer_id")

    report = commands.add_parser("report", help="Reviewer consistency report")
    report.add_argument("--min-reviews", type=int, default=None)

    analytics = commands.add_parser("analytics", help="Bias reduction analytics")
    analytics.add_argument("--days", type=int, default=None)
    analytics.add_argument("--limit", type=int, default=100)

    return parser


def dispatch(service: BiasReductionService, args: argparse.Namespace) -> OperationResult:
    """Run the operation selected on the command line."""
    if args.command == "process":
        return service.process_endorsement_text(
            args.endorsement_id, args.text, args.processing_type
        )
    if args.command == "batch":
        return service.process_batch(args.endorsement_ids)
    if args.command == "consistency":
        return service.analyze_reviewer_consistency(args.reviewer_id)
    if args.command == "report":
        return service.get_reviewer_consistency_report(args.min_reviews)
    return service.get_bias_reduction_analytics(args.days, args.limit)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> build service -> run one operation."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        result = dispatch(build_service(settings), args)
    finally:
        close_pool()

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
