"""Game (wager) audit for the selected period.

A sale takes part in the audit when at least one of its lines is a game line:
it carries a wager identifier or its product is a registered game modality.
Prize payouts are recorded as negative lines, so only lines with a positive
total count as bets.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from bar_core.ledger.frames import require_columns
from bar_core.ledger.models import Sale, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameAudit:
    """Game activity in a period.

    Attributes:
        sales: Sales with at least one game line, newest first.
        total_game_revenue: Net total of game lines (bets minus prizes).
        bet_count: Units of game lines with a positive total.
    """

    sales: tuple[Sale, ...] = ()
    total_game_revenue: float = 0.0
    bet_count: float = 0.0


def audit_games(
    transactions: pd.DataFrame,
    items: pd.DataFrame,
    records: Sequence[Transaction],
) -> GameAudit:
    """Collect the game activity of a period.

    Args:
        transactions: fact_transactions rows of the period.
        items: Costed sale item lines of the period.
        records: Snapshot transactions, indexed like fact_transactions.

    Returns:
        GameAudit for the period.

    """
    require_columns(transactions, ["timestamp"], "fact_transactions")
    require_columns(items, ["tx_pos", "is_game", "quantity", "line_revenue"], "fact_sale_items")

    game_items = items[items["is_game"]]
    if game_items.empty:
        return GameAudit()

    game_tx = transactions[transactions.index.isin(game_items["tx_pos"])]
    game_tx = game_tx.sort_values("timestamp", ascending=False, kind="stable")

    bets = game_items[game_items["line_revenue"] > 0]

    audit = GameAudit(
        sales=tuple(records[pos] for pos in game_tx.index),
        total_game_revenue=float(game_items["line_revenue"].sum()),
        bet_count=float(bets["quantity"].sum()),
    )
    logger.debug("Game audit: %d sale(s), %.0f bet(s)", len(audit.sales), audit.bet_count)
    return audit
