import traceback

from models import Outcome, ValuationResult


def render_summary(result: ValuationResult) -> str:
    formatter = result.local_currency.formatter
    lines = [h.describe(formatter) for h in result.holdings]
    lines.append(f"Total Net Worth: {formatter.format(result.total_net_worth)}")
    return "\n".join(lines)


def render_error(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def render_outcome(outcome: Outcome[ValuationResult]) -> str:
    if outcome.ok:
        return render_summary(outcome.value)
    return render_error(outcome.error)


def result_to_dict(result: ValuationResult) -> dict:
    local = result.local_currency
    return {
        "local_currency": local.id,
        "holdings": [
            {
                "symbol":          h.symbol,
                "quantity":        h.quantity,
                "reference_price": h.reference_price,
                "local_price":     h.local_price,
                "net_worth":       h.net_worth,
                "summary":         h.describe(local.formatter),
            }
            for h in result.holdings
        ],
        "total_net_worth": result.total_net_worth,
        "total_net_worth_display": local.formatter.format(result.total_net_worth),
    }
