import argparse
import logging
import sys

import numpy as np

from trees.KD_tree import DEFAULT_K
from trees.metrics import DEFAULT_SIZES, benchmark_kdtree


def plot_results(res, path):
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig = plt.figure(figsize=(5, 4))
    x = np.arange(len(res['sizes']))
    width = 0.25

    # Gráfico de barras para tiempos
    ax1 = fig.add_subplot(2, 1, 1)
    ax1.bar(x - width, res['build_times'], width, label='build')
    ax1.bar(x, res['insert_times'], width, label='add')
    ax1.bar(x + width, res['query_times'], width, label='range')
    ax1.set_xticks(x)
    ax1.set_xticklabels([str(s) for s in res['sizes']])
    ax1.set_ylabel('Tiempo (s)')
    ax1.legend()

    # altura real / altura de un árbol perfectamente equilibrado
    ax2 = fig.add_subplot(2, 1, 2)
    ax2.bar(x, res['balance_factors'], 0.4, label='altura / ideal')
    ax2.set_xticks(x)
    ax2.set_xticklabels([str(s) for s in res['sizes']])
    ax2.set_xlabel('N (puntos iniciales)')
    ax2.set_ylabel('Factor de equilibrio')
    ax2.legend()

    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


def format_results(res):
    lines = ["KDTree:"]
    for s, b, i, q, m, h, bf in zip(res['sizes'], res['build_times'], res['insert_times'],
                                    res['query_times'], res['mem_peaks'], res['heights'],
                                    res['balance_factors']):
        lines.append(f"N={s}: build={b:.4f}s, add={i:.4f}s, range={q:.4f}s, "
                     f"mem_peak={m/1024:.1f} KiB, height={h}, balance={bf:.2f}")
    return "\n".join(lines)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark del índice k-d")
    parser.add_argument("--sizes", type=int, nargs="+", default=list(DEFAULT_SIZES))
    parser.add_argument("--k", type=int, default=DEFAULT_K)
    parser.add_argument("--queries", type=int, default=50)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--plot", metavar="FILE", default=None,
                        help="guarda los gráficos en FILE (png, svg, ...)")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    res = benchmark_kdtree(args.sizes, k=args.k, queries=args.queries, seed=args.seed)
    print(format_results(res))

    if args.plot:
        plot_results(res, args.plot)
        print(f"Gráficos guardados en {args.plot}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
