from __future__ import annotations

import os
import csv
import time
import logging
import argparse
from datetime import datetime
from typing import List, Optional, Tuple

from metaheuristics.bias import BIAS_FUNCTIONS
from metaheuristics.grasp import GRASP, GraspConfig, IterationRecord
from metaheuristics.solution import Solution
from qbf.binding import PROBLEMS, QBFBinding, make_binding
from qbf.instance import QBFInstance
from qbf.io_instances import iter_instance_files, load_qbf
from qbf.local_search import DEFAULT_TOLERANCE
from qbf.solution import is_feasible
from qbf.visualization import plot_convergence

MODES = ("plain", "reactive", "biased")


def _safe_stem(s: str) -> str:
    s = s.replace(" ", "_")
    s = s.replace(":", "-").replace("/", "-").replace("\\", "-")
    s = "".join(ch for ch in s if ch.isalnum() or ch in "._-")
    return s


def build_config(mode: str, iterations: int, seed: int, alpha: float, n_alphas: int,
                 bias: str, update_every: Optional[int]) -> GraspConfig:
    mode = mode.lower()
    if mode == "plain":
        return GraspConfig(iterations=iterations, alpha=alpha, seed=seed)
    if mode == "reactive":
        return GraspConfig(iterations=iterations, n_alphas=n_alphas, update_every=update_every, seed=seed)
    if mode == "biased":
        return GraspConfig(iterations=iterations, alpha=alpha, bias=bias, seed=seed)
    raise ValueError(f"Unknown mode: {mode}")


def solve_one(binding: QBFBinding, cfg: GraspConfig) -> Tuple[Solution, List[IterationRecord]]:
    engine = GRASP(binding, cfg)
    best = engine.solve()
    return best, engine.history


def solve_multi(binding: QBFBinding,
                mode: str,
                iterations: int,
                restarts: int,
                seed: int,
                alpha: float,
                n_alphas: int,
                bias: str,
                update_every: Optional[int],
                verbose: bool = False) -> Tuple[Solution, List[IterationRecord]]:
    """Multi-restart: runs GRASP 'restarts' times with seeds seed, seed+1, ..."""
    best_sol: Optional[Solution] = None
    best_history: List[IterationRecord] = []
    all_costs = []

    for r in range(restarts):
        cfg = build_config(mode, iterations, seed + r, alpha, n_alphas, bias, update_every)
        sol, history = solve_one(binding, cfg)
        all_costs.append(sol.cost)

        if best_sol is None or sol.cost < best_sol.cost:
            best_sol = sol
            best_history = history

        if verbose and restarts > 1:
            best_mark = " [BEST]" if sol is best_sol else ""
            print(f"  Restart {r+1}/{restarts} (seed={seed+r}): cost={sol.cost:.2f} size={sol.size()}{best_mark}")

    if verbose and restarts > 1:
        print(f"  Multi-start: best={min(all_costs):.2f}, worst={max(all_costs):.2f}, "
              f"avg={sum(all_costs)/len(all_costs):.2f}")

    return best_sol, best_history


def run_batch(paths: List[str],
              problems: List[str],
              mode: str,
              iterations: int,
              restarts: int,
              seed: int,
              alpha: float,
              n_alphas: int,
              bias: str,
              update_every: Optional[int],
              tolerance: float,
              csv_out: str,
              plot: bool) -> None:
    rows = []

    plots_dir = ""
    if plot:
        timestamp = datetime.now().strftime("%d_%H_%M")
        plots_dir = os.path.join("results", "plots", timestamp)
        os.makedirs(plots_dir, exist_ok=True)

    total_tasks = len(paths) * len(problems)
    current_task = 0

    print(f"\n{'='*70}")
    print(f"Batch: {len(paths)} instance(s) x {len(problems)} problem(s) = {total_tasks} task(s)")
    print(f"Mode: {mode}, Iterations: {iterations}, Restarts: {restarts}")
    print(f"{'='*70}\n")

    for idx, p in enumerate(paths):
        file_name = os.path.basename(p)
        print(f"[Instance {idx+1}/{len(paths)}] {file_name}")
        inst = load_qbf(p)

        for problem in problems:
            current_task += 1
            print(f"  [{current_task}/{total_tasks}] {problem.upper()} ... ", end="", flush=True)

            binding = make_binding(inst, problem, tolerance=tolerance)
            t0 = time.time()
            sol, history = solve_multi(
                binding,
                mode=mode,
                iterations=iterations,
                restarts=restarts,
                seed=seed,
                alpha=alpha,
                n_alphas=n_alphas,
                bias=bias,
                update_every=update_every,
            )
            dt = time.time() - t0

            feas = is_feasible(binding.triples, sol)
            status = "OK" if feas else "FAIL"
            print(f"Done: maxVal={-sol.cost:.2f}, size={sol.size()}, {dt:.2f}s, {status}")

            plot_path = ""
            if plot:
                base = _safe_stem(os.path.splitext(file_name)[0])
                plot_path = os.path.join(plots_dir, f"{base}__{problem}__{mode}__RR{restarts}.png")
                plot_convergence(history, title=f"{file_name} | {problem} | {mode}",
                                 save_path=plot_path, show=False)

            rows.append({
                "file": file_name,
                "n": inst.n,
                "problem": problem,
                "mode": mode,
                "iterations": iterations,
                "restarts": restarts,
                "time_total_s": round(dt, 4),
                "cost": sol.cost,
                "max_val": -sol.cost,
                "size": sol.size(),
                "feasible": feas,
                "plot_path": plot_path,
            })

    if not rows:
        raise RuntimeError("No results produced (no instances / problems).")

    with open(csv_out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)

    feasible_count = sum(1 for r in rows if r["feasible"])
    total_time = sum(r["time_total_s"] for r in rows)

    print(f"\n{'='*70}")
    print(f"Finished: {len(rows)} result(s) -> {csv_out}")
    print(f"  Feasible: {feasible_count}/{len(rows)}")
    print(f"  Time: {total_time:.2f}s ({total_time/60:.2f}min)")
    print(f"{'='*70}\n")


def run_single(path: str, args: argparse.Namespace) -> None:
    inst: QBFInstance = load_qbf(path)
    binding = make_binding(inst, args.problem, tolerance=args.tolerance)

    print(f"{os.path.basename(path)}: n={inst.n}, problem={args.problem}, mode={args.mode}, "
          f"{args.restarts} restart(s) x {args.iterations} iteration(s)")
    t0 = time.time()
    sol, history = solve_multi(
        binding,
        mode=args.mode,
        iterations=args.iterations,
        restarts=args.restarts,
        seed=args.seed,
        alpha=args.alpha,
        n_alphas=args.alphas,
        bias=args.bias,
        update_every=args.update_every,
        verbose=True,
    )
    dt = time.time() - t0

    print(f"maxVal = {sol}")
    print(f"Time = {dt:.3f} seg")

    if args.plot:
        os.makedirs(os.path.join("results", "plots"), exist_ok=True)
        base = _safe_stem(os.path.splitext(os.path.basename(path))[0])
        save_path = os.path.join("results", "plots", f"{base}__{args.problem}__{args.mode}.png")
        plot_convergence(history, title=f"{os.path.basename(path)} | {args.problem} | {args.mode}",
                         save_path=save_path, show=True)
        print(f"Saved plot -> {save_path}")


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="GRASP for QBF and QBF with prohibited triples.")
    ap.add_argument("--file", type=str, default=None, help="Path to one QBF instance.")
    ap.add_argument("--folder", type=str, default=None, help="Folder of QBF instances (batch mode).")
    ap.add_argument("--csv", type=str, default="results.csv", help="Output CSV file (batch mode).")

    ap.add_argument("--problem", type=str, default="qbf", choices=list(PROBLEMS) + ["both"])
    ap.add_argument("--mode", type=str, default="plain", choices=MODES)
    ap.add_argument("--alpha", type=float, default=0.2, help="Greediness parameter (0..1), plain and biased modes.")
    ap.add_argument("--alphas", type=int, default=10, help="Alpha pool size, reactive mode.")
    ap.add_argument("--update-every", type=int, default=None,
                    help="Iterations between alpha pool updates (default ceil(sqrt(alphas))).")
    ap.add_argument("--bias", type=str, default="linear", choices=sorted(BIAS_FUNCTIONS),
                    help="Rank bias, biased mode.")
    ap.add_argument("--iterations", type=int, default=1000)
    ap.add_argument("--restarts", type=int, default=1, help="Independent runs per instance.")
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--tolerance", type=float, default=DEFAULT_TOLERANCE,
                    help="Local search stops when no move improves by more than this.")

    ap.add_argument("--plot", action="store_true", help="Plot the convergence of the best run.")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = ap.parse_args(argv)
    args.restarts = max(1, int(args.restarts))

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.file is not None:
        if args.problem == "both":
            raise SystemExit("--problem both is only available in batch mode (--folder)")
        run_single(args.file, args)
        return

    if args.folder is None:
        raise SystemExit("Provide either --file or --folder.")

    paths = iter_instance_files(args.folder)
    if not paths:
        raise SystemExit(f"No instance files found in {args.folder}")

    problems = list(PROBLEMS) if args.problem == "both" else [args.problem]
    run_batch(
        paths=paths,
        problems=problems,
        mode=args.mode,
        iterations=args.iterations,
        restarts=args.restarts,
        seed=args.seed,
        alpha=args.alpha,
        n_alphas=args.alphas,
        bias=args.bias,
        update_every=args.update_every,
        tolerance=args.tolerance,
        csv_out=args.csv,
        plot=args.plot,
    )

    print(f"Done. Wrote: {args.csv}")
    print(f"Instances processed: {len(paths)}")


if __name__ == "__main__":
    main()
