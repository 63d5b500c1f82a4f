import logging
from collections.abc import Mapping

import numpy as np

from Nodes.KD_node import Entry, KDNode
from trees.errors import DimensionMismatch, EmptyIndex, NotFound

log = logging.getLogger(__name__)

DEFAULT_K = 2

# orden de recorrido para all()
ASCENDING = -1
DESCENDING = 1


class KDTree:
    """Árbol k-d con valores asociados: búsqueda exacta y consultas por caja.

    Cada nodo en profundidad d parte el espacio por el eje d % k: a la izquierda
    quedan los puntos con coordenada menor, a la derecha los mayores o iguales.
    Un punto (las k coordenadas) se guarda una sola vez.
    """

    def __init__(self, entries=None, k=DEFAULT_K):
        if k < 1:
            raise ValueError(f"k debe ser al menos 1, se recibió {k}")
        self.k = k
        self.root = None
        if entries is not None:
            self.root = self.build(entries)

    # --- utilidades internas ---
    def _axis(self, depth):
        return depth % self.k

    def _point(self, point):
        coords = np.asarray(point)
        if coords.ndim != 1:
            raise DimensionMismatch(self.k, coords.shape)
        if coords.shape[0] != self.k:
            raise DimensionMismatch(self.k, coords.shape[0])
        return tuple(coords.tolist())

    def _entry(self, item):
        """Acepta Entry, un par (punto, valor) o un dict con 'point' y 'value'."""
        if isinstance(item, Mapping):
            point, value = item["point"], item["value"]
        else:
            point, value = item
        return Entry(self._point(point), value)

    def _walk(self, branch=None):
        """Recorre (nodo, profundidad relativa) en preorden sin recursión."""
        start = self.root if branch is None else branch
        stack = [(start, 0)] if start is not None else []
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if node.right is not None:
                stack.append((node.right, depth + 1))
            if node.left is not None:
                stack.append((node.left, depth + 1))

    def _build(self, entries, parent=None, depth=0):
        if not entries:
            return None

        axis = self._axis(depth)

        # sorted es estable: los empates conservan el orden de llegada
        ordered = sorted(entries, key=lambda e: e.point[axis])
        pivot = ordered[(len(ordered) - 1) // 2]

        # los puntos idénticos al pivote se descartan junto con sus valores
        rest = [e for e in ordered if e.point != pivot.point]
        left = [e for e in rest if e.point[axis] < pivot.point[axis]]
        right = [e for e in rest if e.point[axis] >= pivot.point[axis]]

        node = KDNode(pivot.point, pivot.value, parent)
        node.left = self._build(left, node, depth + 1)
        node.right = self._build(right, node, depth + 1)
        return node

    def _rebuild(self, node, depth, entry):
        """Reconstruye el subárbol de node con entry añadido y lo cuelga en su mismo lugar."""
        parent = node.parent
        entries = [e for e in self.all(node) if e.point != entry.point]
        entries.append(entry)
        subtree = self._build(entries, parent, depth)

        if parent is None:
            self.root = subtree
        elif parent.left is node:
            parent.left = subtree
        else:
            parent.right = subtree

        log.debug("subárbol reconstruido en profundidad %d con %d puntos", depth, len(entries))

    # --- operaciones principales ---
    def build(self, entries):
        """Construye un subárbol nuevo a partir de las entradas y devuelve su raíz.

        No toca self.root; el constructor y rebalance() son quienes la reemplazan.
        """
        return self._build([self._entry(e) for e in entries])

    def is_empty(self):
        return self.root is None

    def find(self, point):
        """Devuelve la Entry cuyo punto coincide exactamente con point.

        Lanza EmptyIndex si el índice no tiene nodos y NotFound si el punto no está.
        """
        point = self._point(point)
        if self.root is None:
            raise EmptyIndex(point)

        node, depth = self.root, 0
        while node is not None:
            if node.point == point:
                return node.entry()
            axis = self._axis(depth)
            node = node.left if point[axis] < node.point[axis] else node.right
            depth += 1

        raise NotFound(point)

    def get(self, point, default=None):
        try:
            return self.find(point)
        except NotFound:
            return default

    def range(self, low, high):
        """Todas las entradas con low[i] <= punto[i] <= high[i] en cada eje.

        El orden del resultado no está definido.
        """
        low = self._point(low)
        high = self._point(high)

        found = []
        stack = [(self.root, 0)] if self.root is not None else []
        while stack:
            node, depth = stack.pop()
            point = node.point

            if all(lo <= c <= hi for lo, c, hi in zip(low, point, high)):
                found.append(node.entry())

            # sólo el eje de este nivel permite descartar un lado
            axis = self._axis(depth)
            if point[axis] > high[axis]:
                children = (node.left,)
            elif point[axis] < low[axis]:
                children = (node.right,)
            else:
                children = (node.left, node.right)

            stack.extend((child, depth + 1) for child in children if child is not None)

        return found

    def scan(self, point, distance):
        """Caja de lado 2*distance centrada en point (no es un radio euclídeo)."""
        center = np.asarray(self._point(point))
        return self.range(center - distance, center + distance)

    def all(self, branch=None, order=ASCENDING):
        """Entradas del subárbol (por defecto todo el árbol) en inorden.

        ASCENDING (-1): izquierda, nodo, derecha. DESCENDING (1): derecha, nodo, izquierda.
        """
        if order == ASCENDING:
            first, second = "left", "right"
        elif order == DESCENDING:
            first, second = "right", "left"
        else:
            raise ValueError(f"orden inválido: {order!r} (usa ASCENDING o DESCENDING)")

        points = []
        stack = []
        node = self.root if branch is None else branch
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = getattr(node, first)
            node = stack.pop()
            points.append(node.entry())
            node = getattr(node, second)
        return points

    def add(self, entry):
        """Inserta una entrada intentando mantener el árbol equilibrado.

        Si el punto ya existe en el camino de descenso se reemplaza su valor.
        Cuando la coordenada del siguiente eje choca con la del hijo existente,
        en vez de bajar se reconstruye el subárbol del nodo actual.
        """
        entry = self._entry(entry)

        if self.root is None:
            self.root = KDNode(entry.point, entry.value)
            return

        node, depth = self.root, 0
        while True:
            if node.point == entry.point:
                node.value = entry.value
                return

            axis = self._axis(depth)
            next_axis = self._axis(depth + 1)

            if entry.point[axis] < node.point[axis]:
                child = node.left
                if child is None:
                    node.left = KDNode(entry.point, entry.value, node)
                    return
                if entry.point[next_axis] >= child.point[next_axis]:
                    self._rebuild(node, depth, entry)
                    return
            else:
                child = node.right
                if child is None:
                    node.right = KDNode(entry.point, entry.value, node)
                    return
                if entry.point[next_axis] < child.point[next_axis]:
                    self._rebuild(node, depth, entry)
                    return

            node, depth = child, depth + 1

    def rebalance(self):
        """Reconstruye el árbol completo a partir de todas sus entradas."""
        entries = self.all()
        self.root = self._build(entries)
        log.debug("árbol reequilibrado: %d puntos, altura %d", len(entries), self.height())

    def min(self, branch=None):
        """Nodo más a la izquierda del subárbol.

        Es el extremo estructural, no necesariamente el mínimo de ningún eje
        después de varias inserciones.
        """
        node = self.root if branch is None else branch
        if node is None:
            raise EmptyIndex()
        while node.left is not None:
            node = node.left
        return node.entry()

    def max(self, branch=None):
        """Nodo más a la derecha del subárbol (mismo matiz que min)."""
        node = self.root if branch is None else branch
        if node is None:
            raise EmptyIndex()
        while node.right is not None:
            node = node.right
        return node.entry()

    def height(self, branch=None):
        return max((depth + 1 for _, depth in self._walk(branch)), default=0)

    def __len__(self):
        return sum(1 for _ in self._walk())

    def __iter__(self):
        return iter(self.all())

    def __contains__(self, point):
        return self.get(point) is not None

    def __repr__(self):
        return f"KDTree(k={self.k}, size={len(self)})"
