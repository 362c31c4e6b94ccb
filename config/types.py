from typing import Optional
from pydantic import BaseModel, Field


class EngineSettings(BaseModel):
    """Typed snapshot of the settings the jinx engine reads"""

    render_engine: str = Field(default="jinja", min_length=1)
    script_engine: str = Field(default="python", min_length=1)
    render_component_name: str = Field(default="component", min_length=1)
    render_autoescape: bool = True
    render_strict_undefined: bool = False
    script_run_in_thread: bool = True
    log_level: str = "INFO"
    env_file: Optional[str] = None  # Path of the .env file that was loaded
