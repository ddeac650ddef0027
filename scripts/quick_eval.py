from __future__ import annotations

import argparse
import glob
import sys

import pandas as pd

from mastermind.eval.report import summarize


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sims", default="")
    args = ap.parse_args()

    sim_path = args.sims or (
        sorted(glob.glob("runs/sim_*.csv"))[-1] if glob.glob("runs/sim_*.csv") else ""
    )
    if not sim_path:
        print("No sim csv found in runs/ (expected runs/sim_*.csv)")
        sys.exit(1)

    print(f"\n== Quick Eval ==\nSIMS: {sim_path}\n")
    sims = pd.read_csv(sim_path)

    print("-- Summary by mode --")
    print(summarize(sims).to_string(), "\n")

    # How many guesses solved games needed
    solved = sims[sims["solved"]]
    dist = solved.groupby("mode")["guesses"].value_counts(normalize=True).unstack(fill_value=0)
    print("-- Guesses needed (solved games) --")
    print(dist.round(3).to_string(), "\n")
    sys.stdout.flush()


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        import traceback

        print("quick_eval error:", e)
        traceback.print_exc()
        sys.exit(1)
