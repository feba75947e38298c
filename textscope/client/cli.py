#!/usr/bin/env python3
"""
Command line client for the text analysis API.

Usage:
    textscope-client "Hello world"
    textscope-client "Hello world" --base-url http://localhost:3000 --traces-file client-traces.log
"""

import argparse
import asyncio
import sys

from textscope.adapters.http.adapter_httpx import HttpxGateway
from textscope.adapters.span_sink.adapter_file import FileSpanSink
from textscope.client.text_analysis_client import AnalysisResult, TextAnalysisClient
from textscope.config.environment_variables import EnvironmentVariables
from textscope.domain.services.client_tracer import (
    ClientTracer,
    TraceSession,
    exporting_observer,
    log_client_span,
)
from textscope.domain.services.span_exporter import FileSpanExporter

CLIENT_SERVICE_NAME = "text-analysis-client"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Count characters and vowels of a text via the traced API"
    )
    parser.add_argument("text", help="Text to analyze")
    parser.add_argument(
        "--base-url",
        default=None,
        help="API base URL (default: TEXTSCOPE_BASE_URL or http://localhost:3000)",
    )
    parser.add_argument(
        "--traces-file",
        default=None,
        help="Also append client spans to this file",
    )
    return parser.parse_args(argv)


def print_result(result: AnalysisResult) -> None:
    if result.length_error:
        print(f"length: error ({result.length_error})")
    else:
        print(f"length: {result.length}")
    if result.vowel_error:
        print(f"vowels: error ({result.vowel_error})")
    else:
        print(f"vowels: {result.vowel_count}")


async def run(text: str, base_url: str | None, traces_file: str | None) -> AnalysisResult:
    environment_variables = EnvironmentVariables.refresh()

    exporter = None
    observer = log_client_span
    if traces_file:
        exporter = FileSpanExporter(
            FileSpanSink(traces_file, service_name=CLIENT_SERVICE_NAME)
        )
        observer = exporting_observer(exporter)

    gateway = HttpxGateway(environment_variables)
    client = TextAnalysisClient(
        gateway=gateway,
        tracer=ClientTracer(session=TraceSession(), on_end=observer),
        base_url=base_url or environment_variables.TEXTSCOPE_BASE_URL,
    )
    try:
        return await client.analyze(text)
    finally:
        await gateway.close()
        if exporter:
            exporter.shutdown()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    result = asyncio.run(run(args.text, args.base_url, args.traces_file))
    print_result(result)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
