from __future__ import annotations

import argparse
import json
from typing import Any

from vitalvid.narration.prompts import build_narration_prompt, tier_label
from vitalvid.risk.evaluator import evaluate_panel, worst_tier
from vitalvid.risk.panel import PRESET_NAMES, BloodPanel, load_preset
from vitalvid.risk.tables import SUPPORTED_LOCALES


def _panel_from_args(args: argparse.Namespace) -> BloodPanel:
    if args.preset:
        return load_preset(args.preset)
    missing = [name for name in ("ldl", "hdl", "glucose", "triglyceride") if getattr(args, name) is None]
    if missing:
        raise SystemExit(f"either --preset or all of --ldl/--hdl/--glucose/--triglyceride required (missing: {', '.join(missing)})")
    return BloodPanel.create(
        ldl=args.ldl,
        hdl=args.hdl,
        glucose=args.glucose,
        triglyceride=args.triglyceride,
        ldl_hdl_ratio=args.ratio,
    )


def build_report(panel: BloodPanel, *, locale: str, with_prompts: bool) -> dict[str, Any]:
    evaluations = evaluate_panel(panel, locale=locale)
    report: dict[str, Any] = {
        "panel": panel.to_dict(),
        "overall_risk_level": worst_tier(evaluations.values()).value,
        "evaluations": {key.value: item.to_dict() for key, item in evaluations.items()},
    }
    if with_prompts:
        report["narration_prompts"] = {
            key.value: build_narration_prompt(item, locale=locale) for key, item in evaluations.items()
        }
    return report


def _print_table(report: dict[str, Any], locale: str) -> None:
    print(f"overall: {report['overall_risk_level']}")
    for item in report["evaluations"].values():
        label = tier_label(item["risk_level"], locale=locale)
        print(
            f"{item['metric_name']}: value={item['metric_value']:.2f} "
            f"target={item['target_value']} tier={item['risk_level']} ({label})"
        )
        for idx, rec in enumerate(item["recommendations"], start=1):
            print(f"  {idx}. {rec}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Evaluate a blood panel and print risk tiers.")
    parser.add_argument("--preset", choices=PRESET_NAMES)
    parser.add_argument("--ldl", type=float)
    parser.add_argument("--hdl", type=float)
    parser.add_argument("--glucose", type=float)
    parser.add_argument("--triglyceride", type=float)
    parser.add_argument("--ratio", type=float, help="LDL/HDL ratio, used only when HDL is not positive")
    parser.add_argument("--locale", choices=SUPPORTED_LOCALES, default="ja")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--prompts", action="store_true", help="include narration prompts in JSON output")
    args = parser.parse_args()

    panel = _panel_from_args(args)
    report = build_report(panel, locale=args.locale, with_prompts=args.prompts)
    if args.json:
        print(json.dumps(report, ensure_ascii=False, indent=2))
        return
    _print_table(report, args.locale)


if __name__ == "__main__":
    main()
