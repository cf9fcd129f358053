"""
Price Lookup - retrieves a price point from the pricing matrix.

The matrix is held as a pandas DataFrame with one row per price point,
in declaration order. Nights must match exactly; nothing is
interpolated or rounded.
"""
import pandas as pd

from .errors import NoPriceForCombination
from .models import ON_REQUEST, Numeric, Package, Price


MATRIX_COLUMNS = ['period_position', 'period', 'period_type', 'tier_index', 'nights', 'amount', 'on_request']


def pricing_matrix_frame(package: Package) -> pd.DataFrame:
    """Flatten a package's pricing matrix into a DataFrame."""
    rows = []
    for position, entry in enumerate(package.pricing_matrix):
        for point in entry.prices:
            on_request = not isinstance(point.price, Numeric)
            rows.append({
                'period_position': position,
                'period': entry.period,
                'period_type': entry.period_type,
                'tier_index': point.tier_index,
                'nights': point.nights,
                'amount': float('nan') if on_request else point.price.amount,
                'on_request': on_request,
            })
    return pd.DataFrame(rows, columns=MATRIX_COLUMNS)


def pivot_matrix(package: Package) -> pd.DataFrame:
    """
    Wide view of the matrix: one row per (period, nights), one column per tier label.

    ON_REQUEST cells are shown as the "ON_REQUEST" label.
    """
    df = pricing_matrix_frame(package)
    if df.empty:
        return pd.DataFrame()

    labels = {i: t.label for i, t in enumerate(package.group_size_tiers)}
    df['tier'] = df['tier_index'].map(lambda i: labels.get(i, f"tier {i}"))
    df['price'] = df['amount'].astype(object)
    df.loc[df['on_request'], 'price'] = str(ON_REQUEST)

    wide = (
        df.groupby(['period_position', 'period', 'nights', 'tier'])['price']
        .first()
        .unstack('tier')
    )
    ordered = [labels[i] for i in sorted(labels) if labels[i] in wide.columns]
    wide = wide[ordered].reset_index().drop(columns='period_position')
    wide.columns.name = None
    return wide


def lookup_price(
    matrix: pd.DataFrame,
    period_position: int,
    tier_index: int,
    nights: int,
    *,
    duration_options: tuple[int, ...],
    period_label: str = "",
    tier_label: str = "",
) -> Price:
    """
    Return the price for an exact (period, tier, nights) triple.

    ON_REQUEST is a valid answer, not an error. Raises
    NoPriceForCombination when the nights are not a duration option
    (a package without duration options prices nothing) or the cell is
    missing.
    """
    available = sorted(duration_options)

    if nights not in duration_options:
        raise NoPriceForCombination(tier_label, period_label, nights, available)

    match = matrix[
        (matrix['period_position'] == period_position) &
        (matrix['tier_index'] == tier_index) &
        (matrix['nights'] == nights)
    ]
    if match.empty:
        raise NoPriceForCombination(tier_label, period_label, nights, available)

    row = match.iloc[0]
    if bool(row['on_request']):
        return ON_REQUEST
    return Numeric(float(row['amount']))
