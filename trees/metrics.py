import gc
import math
import time
import tracemalloc

import numpy as np

from .KD_tree import KDTree

DEFAULT_SIZES = (100, 500, 2000)


def _ideal_height(n):
    return max(1, math.ceil(math.log2(n + 1)))


def _random_entries(rng, n, k, span):
    points = rng.uniform(0, span, size=(n, k))
    return [(p, i) for i, p in enumerate(points)]


def partition_violations(tree: KDTree):
    """Pares (ancestro, punto) que rompen la regla izquierda < eje <= derecha."""
    violations = []
    if tree.root is None:
        return violations

    # cada entrada de la pila lleva las restricciones heredadas: (ancestro, eje, lado)
    stack = [(tree.root, 0, ())]
    while stack:
        node, depth, bounds = stack.pop()
        for ancestor, axis, side in bounds:
            if side == "left" and not node.point[axis] < ancestor[axis]:
                violations.append((ancestor, node.point))
            elif side == "right" and not node.point[axis] >= ancestor[axis]:
                violations.append((ancestor, node.point))

        axis = depth % tree.k
        if node.left is not None:
            stack.append((node.left, depth + 1, bounds + ((node.point, axis, "left"),)))
        if node.right is not None:
            stack.append((node.right, depth + 1, bounds + ((node.point, axis, "right"),)))

    return violations


def benchmark_kdtree(sizes=DEFAULT_SIZES, k=2, queries=50, span=100.0, seed=None):
    """Construye, inserta y consulta árboles de distintos tamaños.
    Retorna dict con listas: sizes, build_times, insert_times, query_times,
    mem_peaks, heights, balance_factors
    """
    sizes = list(sizes)
    rng = np.random.default_rng(seed)

    build_times = []
    insert_times = []
    query_times = []
    mem_peaks = []
    heights = []
    balance_factors = []

    for n in sizes:
        initial = _random_entries(rng, n, k, span)
        extra = _random_entries(rng, n, k, span)

        gc.collect()
        tracemalloc.start()

        start = time.perf_counter()
        tree = KDTree(initial, k=k)
        build_times.append(time.perf_counter() - start)

        start = time.perf_counter()
        for point, value in extra:
            tree.add((point, n + value))
        insert_times.append(time.perf_counter() - start)

        # cajas aleatorias de un décimo del lado
        corners = rng.uniform(0, span, size=(queries, k))
        start = time.perf_counter()
        for low in corners:
            tree.range(low, low + span / 10)
        query_times.append(time.perf_counter() - start)

        current, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()

        h = tree.height()
        mem_peaks.append(peak)
        heights.append(h)
        balance_factors.append(h / _ideal_height(len(tree)))

    return {
        'sizes': sizes,
        'build_times': build_times,
        'insert_times': insert_times,
        'query_times': query_times,
        'mem_peaks': mem_peaks,
        'heights': heights,
        'balance_factors': balance_factors
    }


def analyze_kdtree_instance(tree: KDTree):
    """Analiza un KDTree existente y devuelve métricas con la forma de benchmark_kdtree para un único tamaño."""
    gc.collect()
    tracemalloc.start()
    start = time.perf_counter()

    total = 0
    leaves = 0
    h = 0
    for node, depth in tree._walk():
        total += 1
        h = max(h, depth + 1)
        if node.is_leaf:
            leaves += 1

    elapsed = time.perf_counter() - start
    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    return {
        'sizes': [total],
        'times': [elapsed],
        'mem_peaks': [peak],
        'heights': [h],
        'balance_factors': [h / _ideal_height(total) if total else 0.0],
        'leaves': [leaves],
        'violations': [len(partition_violations(tree))]
    }
