from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana RPC (HTTP + WebSocket)
    rpc_endpoint: str = "https://api.mainnet-beta.solana.com"
    ws_endpoint: str = ""  # derived from rpc_endpoint when empty
    rpc_timeout_sec: float = 15.0

    # Pump.fun program watched via logsSubscribe
    pumpfun_program_id: str = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"

    # Mint lookup worker
    mint_fetch_rps: float = 3.0
    min_tick_interval_sec: float = 0.2  # never faster than 5 lookups/s
    mint_queue_max: int = 2000  # oldest pending tx dropped beyond this
    overflow_report_every: int = 50

    # Files
    launch_log_path: str = "pumpguard-launches.log"
    report_csv_path: str = "pumpguard-report.csv"
    report_tsv_path: str = "pumpguard-report.tsv"
    risk_report_path: str = "pumpguard-risk-report.tsv"

    # Stats reporter
    stats_interval_sec: int = 60

    @property
    def resolved_ws_endpoint(self) -> str:
        """WebSocket URL: explicit ws_endpoint, else rpc_endpoint with ws scheme."""
        if self.ws_endpoint:
            return self.ws_endpoint
        if self.rpc_endpoint.startswith("https://"):
            return "wss://" + self.rpc_endpoint[len("https://"):]
        if self.rpc_endpoint.startswith("http://"):
            return "ws://" + self.rpc_endpoint[len("http://"):]
        return self.rpc_endpoint


settings = Settings()
