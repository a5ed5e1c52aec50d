class SolanaRpcError(Exception):
    pass


class SolanaRpcHttpError(SolanaRpcError):
    def __init__(self, status_code: int, method: str) -> None:
        super().__init__(f"HTTP {status_code} for {method}")
        self.status_code = status_code
        self.method = method


class SolanaRpcResponseError(SolanaRpcError):
    def __init__(self, method: str, error: object) -> None:
        super().__init__(f"RPC error for {method}: {error}")
        self.method = method
        self.error = error
