class KDTreeError(Exception):
    pass


class NotFound(KDTreeError, KeyError):
    """El punto buscado no está en el índice."""

    def __init__(self, point, message=None):
        self.point = point
        super().__init__(message or f"no hay ningún nodo en {point}")

    def __str__(self):
        return self.args[0]


class EmptyIndex(NotFound):
    """Consulta sobre un índice sin nodos (error del llamador, no un fallo de búsqueda)."""

    def __init__(self, point=None):
        if point is None:
            message = "el índice está vacío"
        else:
            message = f"el índice está vacío, buscando {point}"
        super().__init__(point, message)


class DimensionMismatch(KDTreeError, ValueError):
    """El punto no tiene K coordenadas."""

    def __init__(self, expected, got):
        self.expected = expected
        self.got = got
        super().__init__(f"se esperaban {expected} coordenadas, se recibieron {got}")
