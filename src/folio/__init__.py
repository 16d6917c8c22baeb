"""folio - portfolio project grid manager."""

__version__ = "0.3.0"
