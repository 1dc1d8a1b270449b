#!/usr/bin/env python3
"""
CLI for the calculation engine and hybrid OCR.

Provides command-line access to query analysis, whiteboard suggestions,
formula execution, photo OCR and the HTTP server.
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import settings
from core.exceptions import OCRError
from services.calculation_service import CalculationService


def print_suggestions(suggestions):
    """Print ranked suggestions."""
    if not suggestions:
        print("No suggestions.")
        return

    for i, suggestion in enumerate(suggestions, 1):
        result = suggestion['result']
        result_text = f" = {result}" if result is not None else ""
        print(f"{i}. [{suggestion['confidence']:.2f}] {suggestion['title']} ({suggestion['type']})")
        print(f"   {suggestion['expression']}{result_text}")
        print(f"   {suggestion['reasoning']}")
        for example in suggestion.get('examples', []):
            print(f"     - {example}")


def analyze_cli(query: str, discipline: str = None):
    """Analyze a conversational query."""
    service = CalculationService()
    context = {'discipline': discipline} if discipline else None

    print("=" * 60)
    print(f"Query: {query}")
    print("=" * 60)
    print_suggestions(service.analyze_query(query, context))


def suggest_cli(text: str):
    """Suggest corrections, conversions and formulas for recognized text."""
    service = CalculationService()

    print("=" * 60)
    print(f"Text: {text}")
    print("=" * 60)
    for parsed in service.parse_text(text):
        unit = f" {parsed['unit']}" if parsed['unit'] else ""
        print(f"✓ {parsed['expression']} = {parsed['result']}{unit}")
    print()
    print_suggestions(service.generate_suggestions(text))


def formula_cli(formula_id: str = None, assignments=None, output_unit: str = None):
    """Execute a formula, or list the catalog when no id is given."""
    service = CalculationService()

    if formula_id is None:
        for formula in service.list_formulas():
            print(f"{formula['id']:<28} {formula['formula']:<40} [{formula['category']}]")
        return

    inputs = {}
    for assignment in assignments or []:
        symbol, _, value = assignment.partition('=')
        try:
            inputs[symbol.strip()] = float(value)
        except ValueError:
            print(f"❌ Error: Invalid input '{assignment}', expected SYMBOL=NUMBER")
            return

    try:
        response = service.calculate_formula(
            inputs=inputs,
            formula_id=formula_id,
            output_unit=output_unit
        )
    except ValueError as e:
        print(f"❌ Error: {e}")
        return

    for step in response['steps']:
        unit = f" {step['unit']}" if step.get('unit') else ""
        print(f"{step['description']}: {step['equation']}{unit}")

    if response['confidence'] == 0:
        print("❌ Calculation failed")
    else:
        print(f"✓ Result: {response['result']} {response['unit']}")


async def image_cli(file_path: str, both_engines: bool = False):
    """Run hybrid OCR on a calculator photo."""
    from api.dependencies import get_ocr_coordinator

    if not os.path.exists(file_path):
        print(f"❌ Error: File not found: {file_path}")
        return None

    service = CalculationService(coordinator=get_ocr_coordinator())
    try:
        if both_engines:
            result = await service.compare_engines(file_path)
        else:
            result = await service.process_image(file_path)
    except OCRError as e:
        print(f"❌ OCR failed: {e}")
        return None
    finally:
        await service.cleanup()

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return result


def serve_cli(host: str, port: int):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("serving.calc_api:app", host=host, port=port)


def main():
    parser = argparse.ArgumentParser(description='SnapCalc calculation CLI')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Analyze an engineering question')
    analyze_parser.add_argument('query', type=str, help='Question text')
    analyze_parser.add_argument('--discipline', type=str, help='Engineering discipline hint')

    # Suggest command
    suggest_parser = subparsers.add_parser('suggest', help='Suggestions for recognized text')
    suggest_parser.add_argument('text', type=str, help='Recognized expression text')

    # Formula command
    formula_parser = subparsers.add_parser('formula', help='Execute or list engineering formulas')
    formula_parser.add_argument('formula_id', type=str, nargs='?', help='Formula ID (omit to list)')
    formula_parser.add_argument('inputs', type=str, nargs='*', help='Inputs as SYMBOL=NUMBER')
    formula_parser.add_argument('--unit', type=str, help='Output unit label')

    # Image command
    image_parser = subparsers.add_parser('image', help='OCR a calculator photo')
    image_parser.add_argument('file', type=str, help='Image file')
    image_parser.add_argument('--both-engines', action='store_true', help='Run and compare both engines')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', type=str, default=settings.api_host, help='Bind address')
    serve_parser.add_argument('--port', type=int, default=settings.api_port, help='Port')

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s"
    )

    if args.command == 'analyze':
        analyze_cli(args.query, args.discipline)
    elif args.command == 'suggest':
        suggest_cli(args.text)
    elif args.command == 'formula':
        formula_cli(args.formula_id, args.inputs, args.unit)
    elif args.command == 'image':
        asyncio.run(image_cli(args.file, args.both_engines))
    elif args.command == 'serve':
        serve_cli(args.host, args.port)
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
