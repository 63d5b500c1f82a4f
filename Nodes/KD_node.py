import weakref
from collections import namedtuple

# Par (punto, valor) que entrega o recibe el usuario
Entry = namedtuple("Entry", ["point", "value"])


class KDNode:
    def __init__(self, point, value, parent=None):
        self.point = point
        self.value = value
        self.left = None
        self.right = None
        # el padre no es dueño del hijo: referencia débil
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self):
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, node):
        self._parent = weakref.ref(node) if node is not None else None

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def entry(self):
        return Entry(self.point, self.value)

    def __repr__(self):
        return f"KDNode({self.point!r}, {self.value!r})"
