from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "PVSIZER_", "case_sensitive": False}

    # App
    environment: str = "development"
    debug: bool = True
    app_name: str = "PV Sizer"
    log_json: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Equipment catalog (JSON file); empty = built-in library
    catalog_path: str = ""

    # Simulation
    scenario_workers: int = 0
    system_loss: float = 0.90
    include_hourly: bool = False


settings = Settings()
