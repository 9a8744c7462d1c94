#!/usr/bin/env python3
"""
Interactive CLI demo for Admission Agent Service.

Provides a simple command-line interface over the sample catalog in
data/catalog. Demonstrates slot carry-over across turns of one session.
"""
import logging
import os
import sys

# Imports assume PYTHONPATH=src is set (e.g., PYTHONPATH=src python demo/cli_demo.py)
from admission_agent.app import AdmissionAgentApp
from admission_agent.config_loader import load_config_from_env
from admission_agent.exceptions import AdmissionAgentError


def print_banner():
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print("  Admission Agent Service - Interactive CLI Demo")
    print("=" * 60)
    print("\nÜniversite tercihleri hakkında sorun:")
    print("  • Net hesaplama  (ODTÜ bilgisayar mühendisliği için kaç net gerekir?)")
    print("  • Taban puan     (Boğaziçi işletme taban puanı nedir?)")
    print("  • Kontenjan      (İTÜ mimarlık kontenjanı kaç kişi?)")
    print("  • Bölüm listesi  (Hacettepe'de hangi bölümler var?)")
    print("\nType 'quit' or 'exit' to end the session, 'reset' to start over.")
    print("-" * 60 + "\n")


def print_response(result: dict):
    """Print formatted response."""
    print(f"\n🎯 Intent: {result['intent']} (confidence {result['confidence']})")
    if result["entities"]:
        entities = ", ".join(f"{k}={v}" for k, v in result["entities"].items())
        print(f"🏛️  Entities: {entities}")

    calculation = result.get("calculation")
    if calculation:
        print(
            f"📈 Safe target: {calculation['safeTargetScore']} "
            f"(margin {calculation['safetyMargin']:.0%}, {calculation['basedOnYear']} data, "
            f"confidence {calculation['confidenceLevel']})"
        )
        for subject, band in calculation["requiredNets"].items():
            print(f"   {subject:<18} {band['min']:>6} - {band['max']:<6}")
        for scenario in calculation.get("scenarios", []):
            print(f"   ↳ margin {scenario['safetyMargin']:.0%}: target {scenario['safeTargetScore']}")

    lookup = result.get("lookup")
    if lookup:
        print(
            f"📊 {lookup['year']} {lookup['examType']}: taban {lookup['baseScore']}, "
            f"tavan {lookup['ceilingScore']}, sıralama {lookup['baseRank']}, "
            f"kontenjan {lookup['quota']}"
        )

    for program in result.get("programs", []) or []:
        print(f"   • {program['name']} ({program['institution']}, {program['language']})")

    clarification = result.get("clarification")
    if clarification:
        print(f"❓ {clarification.get('question', clarification['slot'])}")

    error = result.get("error")
    if error:
        print(f"⚠️  {error['kind']}: {error['details']}")

    for warning in result["warnings"]:
        print(f"⚠️  {warning['kind']}: {warning['details']}")

    if result["suggestions"]:
        print("💡 " + "\n💡 ".join(result["suggestions"]))
    print("-" * 60)


def setup_app() -> AdmissionAgentApp:
    """Set up and initialize the admission agent app."""
    print("🚀 Initializing Admission Agent Service...")
    os.environ.setdefault("ADMISSION_CATALOG_DIR", "data/catalog")
    config = load_config_from_env()
    app = AdmissionAgentApp(config)
    app.initialize()
    print("✅ Ready.")
    return app


def main():
    logging.basicConfig(
        level=os.getenv("ADMISSION_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = setup_app()
    except AdmissionAgentError as e:
        print(f"❌ Could not start: {e}")
        sys.exit(1)

    print_banner()
    session_id = "cli"

    while True:
        try:
            query = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n👋 Goodbye!")
            break

        if not query:
            continue
        if query.lower() in ("quit", "exit"):
            print("👋 Goodbye!")
            break
        if query.lower() == "reset":
            app.end_session(session_id)
            print("🔄 Session cleared.")
            continue

        print_response(app.chat(query, session_id=session_id))


if __name__ == "__main__":
    main()
