from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数（接頭辞 VOCABUILDER_）から読み込まれるアプリ設定クラス。
    - store_*: 履歴/復習進捗の永続化先
    - gemini_*: 翻訳プロバイダ（Gemini）の接続設定
    - session_size: 1 回の復習セッションの最大出題数
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level / ルートロガーのレベル",
    )

    # --- 永続化 ---
    store_backend: str = Field(
        default="sqlite",
        description="Key-value backend (sqlite|memory) / 永続化バックエンド",
    )
    store_path: str = Field(
        default=".data/vocabuilder.sqlite3",
        description="Path to the SQLite key-value file / SQLite KV ファイルのパス",
    )
    storage_namespace: str = Field(
        default="vocabuilder",
        description="Prefix for persisted collection keys / 永続化キーの接頭辞",
    )

    # --- 復習セッション ---
    session_size: int = Field(
        default=10,
        ge=1,
        description="Max cards per review session / 1 セッションの最大出題数",
    )

    # --- 翻訳プロバイダ ---
    gemini_api_key: str | None = Field(default=None, description="Gemini API Key")
    gemini_model: str = Field(
        default="gemini-2.5-flash-lite",
        description="Gemini model name / 利用するモデル名",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini REST base URL",
    )
    translation_timeout_ms: int = Field(
        default=15000,
        description="Per-request timeout for translation calls (ms) / 翻訳呼出しのタイムアウト(ms)",
    )
    target_language: str = Field(
        default="Ukrainian",
        description="Language the words are translated into / 翻訳先の言語",
    )

    # Pydantic v2 settings config
    # - env_file: .env を読み込む
    # - extra: .env に存在する未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_prefix="VOCABUILDER_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )


settings = Settings()
