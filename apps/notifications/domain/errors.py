from __future__ import annotations


class EmailGatewayError(RuntimeError):
    pass
