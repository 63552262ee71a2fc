"""
Cannibalism Demonstration Script

This example runs the reference size-spectrum scenario twice:
1. Without cannibalism (the consumer only eats the resource)
2. With cannibalism (the consumer also eats smaller conspecifics)

Each run starts from n(w) = 0.001 * w^-1.8, runs 10 years, then rescales
the consumer abundance by 1e-7 and continues for 30 years. A third run
repeats the cannibalism scenario under red-noise forcing of the resource
carrying capacity.
"""

import logging

import matplotlib.pyplot as plt

from pysizespec import (
    ForcingParams,
    configure_logging,
    create_model_params,
    initial_consumer_density,
    initial_resource_density,
    join_timeseries,
    resume,
    run,
    set_model,
)
from pysizespec.core.analysis import biomass_timeseries, oscillation_summary
from pysizespec.core.plotting import plot_biomass, plot_mortality, plot_spectrum


def run_scenario(params, seed=None):
    """Run 10 years, rescale by 1e-7, run 30 more years."""
    model = set_model(params)
    n = initial_consumer_density(model, coefficient=0.001, exponent=-1.8)
    n_pp = initial_resource_density(model)

    first = run(model, n, n_pp, duration=10.0, save_interval=0.5, seed=seed)
    second = resume(model, first, duration=30.0, save_interval=0.1, scale=1e-7)
    return model, join_timeseries(first, second)


def describe(name, model, series):
    biomass = biomass_timeseries(model, series)
    summary = oscillation_summary(biomass, window=20.0)
    print(f"\n{name}:")
    print(f"   Final biomass: {biomass.iloc[-1]:.4g}")
    print(f"   Peaks in last 20 yr: {summary['n_peaks']}")
    print(f"   Mean period: {summary['mean_period']:.2f} yr")
    print(f"   Relative amplitude: {summary['relative_amplitude']:.3f}")


def main():
    """Run all scenarios."""
    configure_logging(level=logging.INFO)

    print("\n" + "=" * 60)
    print("SIZE SPECTRUM CANNIBALISM DEMONSTRATION")
    print("=" * 60)

    base = create_model_params()
    scenarios = {
        "No cannibalism": run_scenario(base.with_changes(interaction=0.0)),
        "Cannibalism": run_scenario(base.with_changes(interaction=1.0)),
        "Cannibalism + red noise": run_scenario(
            base.with_changes(forcing=ForcingParams("red_noise", phi=0.95, sigma=0.1)),
            seed=42,
        ),
    }

    for name, (model, series) in scenarios.items():
        describe(name, model, series)

    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    for ax, (name, (model, series)) in zip(axes, scenarios.items()):
        plot_biomass(model, series, min_w=1.0, title=name, ax=ax)
    fig.savefig("cannibalism_demo_biomass.png", dpi=150, bbox_inches="tight")

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    for ax, name in zip(axes, ["No cannibalism", "Cannibalism"]):
        model, series = scenarios[name]
        plot_spectrum(series, title=f"{name}: final spectrum", ax=ax)
    fig.savefig("cannibalism_demo_spectra.png", dpi=150, bbox_inches="tight")

    model, series = scenarios["Cannibalism"]
    fig = plot_mortality(model, series.final_n, series.final_n_pp)
    fig.savefig("cannibalism_demo_mortality.png", dpi=150, bbox_inches="tight")

    print("\nGenerated files:")
    print("  - cannibalism_demo_biomass.png")
    print("  - cannibalism_demo_spectra.png")
    print("  - cannibalism_demo_mortality.png")
    print()


if __name__ == "__main__":
    main()
