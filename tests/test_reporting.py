import matplotlib.pyplot as plt
import pandas as pd

from forecast_vignette.reporting import (
    combined_table,
    describe_direction,
    describe_overprediction,
    plot_rates,
    rates_table,
)
from forecast_vignette.summaries import correctly_increases, total_overprediction


def _two_model_table(table_factory):
    return pd.concat(
        [
            table_factory("ARIMA", [100.0, 150.0, 120.0], [110.0, 160.0, 130.0]),
            table_factory("ETS", [100.0, 150.0, 120.0], [90.0, 140.0, 130.0]),
            table_factory("ARIMA+Twitter", [100.0], [120.0]),
        ],
        ignore_index=True,
    )


def test_rates_and_combined_tables(table_factory):
    table = _two_model_table(table_factory)
    over = total_overprediction(table)
    dirn = correctly_increases(table)

    shown = rates_table(over, "Sufficient procurement")
    assert list(shown.columns) == ["Model", "Sufficient procurement"]
    assert dict(zip(shown["Model"], shown["Sufficient procurement"])) == {
        "ARIMA": "100%",
        "ARIMA+Twitter": "100%",
        "ETS": "33%",
    }

    both = combined_table(over, dirn)
    assert list(both.columns) == ["Model", "Sufficient procurement", "Predicted increase"]
    twitter = both.loc[both["Model"] == "ARIMA+Twitter"].iloc[0]
    assert twitter["Predicted increase"] == "n/a"


def test_prose_names_best_and_worst_models(table_factory):
    table = _two_model_table(table_factory)
    text = describe_overprediction(total_overprediction(table))
    assert text.startswith("If supplies had been procured")
    assert "ARIMA would have covered" in text
    assert "ETS was the least cautious" in text
    assert "33%" in text

    text = describe_direction(correctly_increases(table))
    assert "100%" in text


def test_prose_for_empty_results(table_factory):
    table = table_factory("ETS", [150.0, 120.0], [90.0, 80.0])
    assert describe_direction(correctly_increases(table)).startswith("No model")


def test_plot_rates_returns_figure(scenario_table):
    fig = plot_rates(total_overprediction(scenario_table), show=False)
    assert isinstance(fig, plt.Figure)
    ax = fig.axes[0]
    assert len(ax.patches) == 1
    assert ax.get_title() == "Overprediction by model"
    plt.close(fig)
