from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class AgentIds(BaseModel):
    """OpenServ agent ids, one per remote capability."""
    coordinator: int      # this bot's own agent (receives delivery tasks)
    web_search: int       # DuckDuckGo / Brave web search assistant
    content_reader: int   # webpage content reader
    deep_research: int    # exa research assistant
    report_writer: int    # copywriter
    contract_scanner: int # ETH wallet / contract scanner
    json_analyzer: int    # JSON parser, used for URL extraction


class Settings(BaseSettings):
    # Telegram
    telegram_bot_token: str
    telegram_webhook_secret: str = ""  # Optional: for webhook verification
    telegram_use_polling: bool = False  # Long polling instead of webhook (local dev)

    # OpenServ
    openserv_api_key: str
    openserv_api_url: str = "https://api.openserv.ai"
    tools_secret: str = ""  # Optional: required X-Tools-Secret header on /tools/*
    workspace_id: int

    # Agent ids (override per workspace)
    agent_id: int = 280
    brave_search_id: int = 171
    web_content_reader_id: int = 172
    exa_agent_id: int = 386
    copy_writer_id: int = 41
    eth_scanner_id: int = 167
    json_analyzer_id: int = 65

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Sessions and follow-ups
    session_history_limit: int = 50
    tracked_workflow_limit: int = 1000
    followup_after_seconds: float = 300
    analysis_timeout_seconds: float = 1800

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def agents(self) -> AgentIds:
        return AgentIds(
            coordinator=self.agent_id,
            web_search=self.brave_search_id,
            content_reader=self.web_content_reader_id,
            deep_research=self.exa_agent_id,
            report_writer=self.copy_writer_id,
            contract_scanner=self.eth_scanner_id,
            json_analyzer=self.json_analyzer_id,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
