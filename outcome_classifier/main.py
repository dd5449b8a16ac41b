import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import LOG_FORMAT, LOG_LEVEL, SEED_REQUEST_DELAY, ClassifierSettings
from .exceptions import InvalidInputError, LearningUnavailableError, OutcomeClassifierError
from .models.description import Language
from .processing.classifier import OutcomeClassifier
from .processing.seeder import seed_system_descriptions
from .services.ai_reasoner import OutcomeReasoner
from .services.description_store import DescriptionStore
from .services.embedding_service import EmbeddingService
from .utils.explanation import render_explanation
from .utils.statistics import calculate_classification_statistics

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path("outcome_descriptions.json")
DEFAULT_CONFIRMATIONS_PATH = Path("outcome_confirmations.json")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    # Suppress HTTP request logging from OpenAI/httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def create_embedder(settings: ClassifierSettings) -> EmbeddingService | None:
    """Build the embedding service, or None when no API key is configured."""
    try:
        return EmbeddingService(
            model=settings.embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.embedding_timeout,
            max_retries=settings.max_retries,
        )
    except ValueError as e:
        logger.warning(f"Embedding service unavailable: {e!s}")
        return None


def create_classifier(store: DescriptionStore, settings: ClassifierSettings) -> OutcomeClassifier:
    return OutcomeClassifier(
        store,
        embedder=create_embedder(settings),
        reasoner=OutcomeReasoner(
            model=settings.ai_model,
            temperature=settings.ai_temperature,
            timeout=settings.ai_timeout,
            max_retries=settings.max_retries,
        ),
        settings=settings,
    )


def load_summaries(path: Path) -> list[dict]:
    """Read one summary or a list of summaries from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"Could not read summaries from {path}: {e!s}") from e
    return data if isinstance(data, list) else [data]


def cmd_seed(args: argparse.Namespace, settings: ClassifierSettings) -> int:
    store = DescriptionStore.load(args.store, dimension=settings.embedding_dimension)
    embedder = create_embedder(settings)
    if embedder is None:
        print("Seeding needs OPENAI_API_KEY", file=sys.stderr)
        return 1

    report = seed_system_descriptions(store, embedder, delay=args.delay)
    store.save(args.store)
    print(f"Seeded: {report.seeded} | Skipped: {report.skipped} | Failed: {report.failed}")
    return 1 if report.failed and not report.seeded and not report.skipped else 0


def cmd_classify(args: argparse.Namespace, settings: ClassifierSettings) -> int:
    store = DescriptionStore.load(args.store, dimension=settings.embedding_dimension)
    classifier = create_classifier(store, settings)
    language = Language(args.language)

    results = []
    for path in args.files:
        for summary in load_summaries(path):
            result = classifier.classify(summary, company_id=args.company)
            results.append(result)
            if args.json:
                print(json.dumps(result.to_dict(), ensure_ascii=False))
            else:
                print(f"[{result.execution_id or path.name}] {result.metric_key.value} "
                      f"({result.detection_layer.value}, {result.confidence:.2f})")
                print(render_explanation(result, language))
                print()

    # Usage statistics were updated by vector matches
    store.save(args.store)

    if args.audit_csv:
        classifier.audit.export_csv(args.audit_csv)

    if not args.json:
        print(calculate_classification_statistics(results).to_display_string())
    return 0


def cmd_confirm(args: argparse.Namespace, settings: ClassifierSettings) -> int:
    store = DescriptionStore.load(args.store, dimension=settings.embedding_dimension)
    classifier = OutcomeClassifier(store, embedder=create_embedder(settings), settings=settings)
    classifier.feedback.load(args.confirmations)

    summary = None
    if args.summary:
        summaries = load_summaries(args.summary)
        if len(summaries) != 1:
            raise InvalidInputError(f"{args.summary} must hold exactly one summary")
        summary = summaries[0]

    try:
        confirmation = classifier.confirm(
            args.execution_id,
            args.metric_key,
            custom_description=args.description,
            company_id=args.company,
            summary=summary,
        )
    except LearningUnavailableError as e:
        # The confirmation is kept on disk even though nothing was learned
        classifier.feedback.save(args.confirmations)
        print(f"Confirmation recorded but not learned: {e!s}", file=sys.stderr)
        return 1

    classifier.feedback.save(args.confirmations)
    store.save(args.store)
    print(f"Learned {confirmation.metric_key.value} for {confirmation.execution_id} "
          f"(description {confirmation.learned_description_id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outcome-classifier",
        description="Classify workflow executions into business outcomes.",
    )
    parser.add_argument("--store", type=Path, default=DEFAULT_STORE_PATH,
                        help="JSON file holding outcome descriptions")
    parser.add_argument("--confirmations", type=Path, default=DEFAULT_CONFIRMATIONS_PATH,
                        help="JSON file holding human confirmations")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Embed the built-in outcome descriptions")
    seed.add_argument("--delay", type=float, default=SEED_REQUEST_DELAY,
                      help="Seconds between embedding requests")
    seed.set_defaults(handler=cmd_seed)

    classify = subparsers.add_parser("classify", help="Classify execution summaries")
    classify.add_argument("files", type=Path, nargs="+",
                          help="JSON files with one summary or a list of summaries")
    classify.add_argument("--company", default=None)
    classify.add_argument("--json", action="store_true", help="Print one JSON result per line")
    classify.add_argument("--language", choices=[Language.EN.value, Language.ZH.value],
                          default=Language.EN.value)
    classify.add_argument("--audit-csv", type=Path, default=None)
    classify.set_defaults(handler=cmd_classify)

    confirm = subparsers.add_parser("confirm", help="Confirm an execution's outcome")
    confirm.add_argument("execution_id")
    confirm.add_argument("metric_key")
    confirm.add_argument("--description", default=None)
    confirm.add_argument("--company", default=None)
    confirm.add_argument("--summary", type=Path, default=None,
                         help="JSON file with the execution's summary")
    confirm.set_defaults(handler=cmd_confirm)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the outcome classifier command line."""
    # Load environment variables from .env file
    load_dotenv()

    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = ClassifierSettings.from_env()
        return args.handler(args, settings)
    except InvalidInputError as e:
        print(f"Invalid input: {e!s}", file=sys.stderr)
        return 2
    except OutcomeClassifierError as e:
        print(f"Error: {e!s}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
