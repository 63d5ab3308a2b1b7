#!/usr/bin/env python3
"""
Check which AI providers are configured.

Reads API keys from the environment (or .env) and lists the providers that
are ready. With --message, sends a message through every ready provider and
prints the combined answer.

Usage:
    python scripts/check_providers.py
    python scripts/check_providers.py --message "What helps with a mild fever?" --locale en
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mimucare import ProviderRegistry, ResponseAggregator, configure_logging, load_settings
from mimucare.locale import SUPPORTED_LOCALES


def main():
    parser = argparse.ArgumentParser(description="AI provider check")
    parser.add_argument("--message", default=None, help="Message to send to every ready provider")
    parser.add_argument("--locale", choices=SUPPORTED_LOCALES, default=None)
    args = parser.parse_args()

    configure_logging()
    settings = load_settings()
    registry = ProviderRegistry.from_settings(settings)

    print("=" * 60)
    print("AI Provider Status")
    print("=" * 60)
    for adapter in registry.adapters:
        state = "ready" if adapter.ready else "not configured"
        print(f"  {adapter.display_name:<12} {state}")

    if not registry.has_any():
        print("\nNo providers configured. Set GEMINI_API_KEY, OPENAI_API_KEY or DEEPSEEK_API_KEY.")
        return

    if args.message:
        locale = args.locale or settings.DEFAULT_LOCALE
        aggregator = ResponseAggregator(registry, timeout=settings.PROVIDER_TIMEOUT_SECONDS)
        answer = asyncio.run(aggregator.aggregate(args.message, locale))

        print("\nResponses:")
        for response in answer.responses:
            print(f"  {response.provider_id.value:<12} confidence {round(response.confidence * 100)}%")
        for provider, error in answer.failures.items():
            print(f"  {provider:<12} FAILED: {error}")
        print("\n" + answer.text)


if __name__ == "__main__":
    main()
