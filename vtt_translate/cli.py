import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import PipelineConfig, TranslationConfig
from .errors import VttTranslateError
from .pipeline import VttTranslationAgent
from .types import Language

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ", ".join(language.value for language in Language)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate a WebVTT subtitle file sentence by sentence.")
    parser.add_argument("-f", "--source-vtt-file", type=Path, required=True, help="The VTT file to translate.")
    parser.add_argument(
        "--target-vtt-file",
        type=Path,
        help="Output VTT file. Defaults to a name derived from the source file and target language.",
    )
    parser.add_argument(
        "--source-language",
        type=str,
        help=f"Language of the source VTT file ({SUPPORTED_LANGUAGES}). Auto-detected when omitted.",
    )
    parser.add_argument(
        "-l",
        "--target-language",
        type=str,
        default=Language.FA.value,
        help=f"Language to translate the VTT file to ({SUPPORTED_LANGUAGES}).",
    )
    parser.add_argument(
        "--azure-resource-key",
        type=str,
        help="Key for the Azure Translator resource (default: $AZURE_TRANSLATION_RESOURCE_KEY).",
    )
    parser.add_argument(
        "--azure-resource-region",
        type=str,
        help="Azure region of the Translator resource (default: $AZURE_TRANSLATION_RESOURCE_REGION).",
    )
    parser.add_argument("--translation-provider", type=str, choices=["azure", "openai"], default="azure", help="Translation backend to use.")
    parser.add_argument("--translation-model", type=str, default="gpt-4o-mini", help="Model name for the openai provider.")
    parser.add_argument("--max-retries", type=int, default=3, help="Attempts per request on network or rate limit errors.")
    parser.add_argument("--no-overwrite", action="store_true", help="Fail instead of replacing an existing output file.")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR).")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    translation = TranslationConfig(
        provider=args.translation_provider,
        model=args.translation_model,
        max_retries=args.max_retries,
    )
    if args.translation_provider == "azure":
        translation.api_key = args.azure_resource_key
        translation.region = args.azure_resource_region
    else:
        translation.api_key_env = "OPENAI_API_KEY"
        translation.region_env = None

    return PipelineConfig(
        translation=translation,
        source_language=Language.parse(args.source_language) if args.source_language else None,
        target_language=Language.parse(args.target_language),
        overwrite=not args.no_overwrite,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        agent = VttTranslationAgent(config=build_config(args))
        artifacts = agent.run(source_path=args.source_vtt_file, target_path=args.target_vtt_file)
    except VttTranslateError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted, no output written")
        return 130

    logger.info("Translated subtitles: %s", artifacts.target_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
