"""Balance engine and settlement ledger package."""

from tripsplit.balances.engine import (
    collect_participants,
    compute_balances,
    compute_net_positions,
    compute_participant_summary,
    compute_trip_summary,
    match_debts,
    round_money,
)
from tripsplit.balances.ledger import (
    apply_settled_state,
    find_debt,
    get_settled,
    get_total_settled_amount,
    get_total_unsettled_amount,
    get_unsettled,
    mark_settled,
    summarize_settlements,
)

__all__ = [
    # Engine
    "collect_participants",
    "compute_balances",
    "compute_net_positions",
    "compute_participant_summary",
    "compute_trip_summary",
    "match_debts",
    "round_money",
    # Ledger
    "apply_settled_state",
    "find_debt",
    "get_settled",
    "get_total_settled_amount",
    "get_total_unsettled_amount",
    "get_unsettled",
    "mark_settled",
    "summarize_settlements",
]
