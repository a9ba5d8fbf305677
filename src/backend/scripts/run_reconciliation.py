from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.profit_engine.config import describe_reconciliation_rules  # noqa: E402
from common.profit_engine.context import format_money  # noqa: E402
from connectors.external import ExternalServiceError  # noqa: E402
from pipelines.data_source import MerchantInputs, load_fixture_inputs  # noqa: E402
from pipelines.live_platforms import LivePlatformsDataSource  # noqa: E402
from pipelines.review import MerchantReview, run_merchant_review  # noqa: E402
from pipelines.settings import DATA_SOURCES, ProfitEngineSettings, get_settings  # noqa: E402
from pipelines.windows import AdGrouping  # noqa: E402

logger = logging.getLogger("scripts.run_reconciliation")


def _write_markdown(review: MerchantReview, out_path: Path, rule_descriptions: dict[str, str]) -> None:
    report = review.report
    lines = [
        f"# Profit & Reconciliation Review: {review.merchant_id}",
        "",
        f"Generated at: {report.generated_at.isoformat()}",
    ]
    if report.window_start and report.window_end:
        lines.append(f"Window: {report.window_start.isoformat()} to {report.window_end.isoformat()}")
    lines += ["", "## Rules"]
    for key, sentence in rule_descriptions.items():
        lines.append(f"- {key}: {sentence}")

    lines += ["", "## Variable costs"]
    totals = review.cost_totals
    lines.append(f"- Shipping: {format_money(totals.shipping_cost)}")
    lines.append(f"- Payment fees: {format_money(totals.payment_fees)}")
    lines.append(f"- Platform fees: {format_money(totals.platform_fees)}")
    lines.append(f"- Custom costs: {format_money(totals.custom_costs)}")
    lines.append(f"- Orders evaluated: {len(review.order_costs)}")

    lines += ["", "## Flags by severity"]
    if not report.totals:
        lines.append("- none")
    for severity, count in report.totals.items():
        lines.append(f"- {severity.value}: {count}")

    lines += ["", "## Flags"]
    for flag in report.flags:
        lines.append("")
        lines.append(f"### {flag.rule_id} ({flag.severity.value}) {flag.window_key}")
        lines.append(f"- {flag.message}")
        lines.append(f"- Observed: {flag.observed} | Expected: {flag.expected} | Delta: {flag.delta}")
    out_path.write_text("\n".join(lines) + "\n")


def _load_inputs(
    source: str,
    merchant_dir: Path,
    merchant_id: str | None,
    days: int | None,
    settings: ProfitEngineSettings,
) -> MerchantInputs:
    if source == "live":
        live = LivePlatformsDataSource(
            merchants_root=merchant_dir.parent,
            days=days or settings.live_days,
            base_thresholds=settings.rule_config(),
        )
        inputs = live.build_merchant_inputs(merchant_id=merchant_dir.name)
        return replace(inputs, merchant_id=merchant_id) if merchant_id else inputs
    return load_fixture_inputs(merchant_dir, merchant_id=merchant_id, base_thresholds=settings.rule_config())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute variable costs and reconciliation flags for one merchant directory."
    )
    parser.add_argument(
        "--fixtures-dir",
        required=False,
        help="Path to a merchant fixtures directory (orders.json, payouts.json, ad_metrics.json, ...).",
    )
    parser.add_argument(
        "--merchant-id",
        default=None,
        help="Merchant id; resolved under PROFIT_ENGINE_FIXTURES_ROOT when --fixtures-dir is omitted.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory for review files (defaults to the fixtures dir).",
    )
    parser.add_argument(
        "--ad-grouping",
        choices=[g.value for g in AdGrouping],
        default=None,
        help="Ad window grouping (defaults to PROFIT_ENGINE_AD_GROUPING, then ACCOUNT).",
    )
    parser.add_argument(
        "--source",
        choices=DATA_SOURCES,
        default=None,
        help="fixtures reads payouts.json/ad_metrics.json; live fetches them per platforms.json "
        "(defaults to PROFIT_ENGINE_DATA_SOURCE, then fixtures).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Live window length in days, ending today (defaults to PROFIT_ENGINE_LIVE_DAYS, then 7).",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.fixtures_dir:
        fixtures_dir = Path(args.fixtures_dir).resolve()
    elif args.merchant_id and settings.fixtures_root is not None:
        fixtures_dir = (settings.fixtures_root / args.merchant_id).resolve()
    else:
        raise SystemExit("Provide --fixtures-dir, or --merchant-id with PROFIT_ENGINE_FIXTURES_ROOT set.")

    output_dir = Path(args.output_dir).resolve() if args.output_dir else fixtures_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    source = args.source or settings.data_source
    try:
        inputs = _load_inputs(source, fixtures_dir, args.merchant_id, args.days, settings)
    except (ValueError, OSError, ExternalServiceError) as exc:
        raise SystemExit(f"Could not load {source} inputs from {fixtures_dir}: {exc}") from exc

    grouping = AdGrouping(args.ad_grouping) if args.ad_grouping else settings.ad_grouping
    review = run_merchant_review(inputs, grouping=grouping)

    base_name = f"reconciliation_{review.merchant_id}"
    out_json = output_dir / f"{base_name}.json"
    out_md = output_dir / f"{base_name}.md"
    out_json.write_text(json.dumps(review.model_dump(mode="json"), indent=2))
    _write_markdown(review, out_md, describe_reconciliation_rules(inputs.merchant_config.thresholds))

    logger.info("Wrote %s and %s (%d flags)", out_json, out_md, len(review.report.flags))
    print(f"Wrote {out_json}")
    print(f"Wrote {out_md}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
