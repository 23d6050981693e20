"""Observability endpoints for claim counters and Prometheus metrics."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from gamepass_api.api.dependencies.security import require_internal_api_key
from gamepass_api.observability.gamepass import get_gamepass_store


router = APIRouter(prefix="/observability", tags=["Observability"])


@router.get(
    "/gamepass",
    dependencies=[Depends(require_internal_api_key)],
    summary="Game Pass claim observability snapshot",
)
async def get_gamepass_snapshot() -> dict[str, object]:
    return get_gamepass_store().snapshot().as_dict()


def _format_metric(name: str, description: str, value: int | float, labels: dict[str, str] | None = None) -> list[str]:
    label_fragment = ""
    if labels:
        formatted = ",".join(f'{key}="{val}"' for key, val in sorted(labels.items()))
        label_fragment = f"{{{formatted}}}"
    return [
        f"# HELP {name} {description}",
        f"# TYPE {name} gauge",
        f"{name}{label_fragment} {value}",
    ]


@router.get(
    "/prometheus",
    dependencies=[Depends(require_internal_api_key)],
    summary="Prometheus-formatted observability metrics",
    response_class=PlainTextResponse,
)
async def get_prometheus_metrics() -> PlainTextResponse:
    snapshot = get_gamepass_store().snapshot()

    lines: list[str] = []
    for code, value in sorted(snapshot.outcomes.items()):
        lines.extend(
            _format_metric(
                "gamepass_claim_outcomes_total",
                "Claim attempts grouped by outcome code",
                value,
                labels={"outcome": code},
            )
        )
    for reward_type, value in sorted(snapshot.rewards.items()):
        lines.extend(
            _format_metric(
                "gamepass_rewards_granted_total",
                "Rewards granted grouped by payload type",
                value,
                labels={"reward_type": reward_type},
            )
        )
    lines.extend(
        _format_metric("gamepass_zen_spent_total", "Zen debited for skip-ahead claims", snapshot.zen_spent_total)
    )
    lines.extend(
        _format_metric("gamepass_claim_retries_total", "Claims retried after transient storage conflicts", snapshot.retries)
    )

    return PlainTextResponse("\n".join(lines) + "\n", media_type="text/plain; version=0.0.4")
