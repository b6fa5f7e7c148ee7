import os
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator
from pydantic_core import PydanticCustomError


class Settings(BaseModel):
    """Settings model for environment variables with validation and defaults."""

    # Simulated Backend
    success_rate: float = Field(
        default=1.0, description="Probability that any single call succeeds"
    )
    max_delay_ms: int = Field(
        default=1000, description="Upper bound of the simulated call delay"
    )
    storage_key: str = Field(
        default="todo-lists", description="Blob key holding the todo lists"
    )

    # Random Action Generator
    simulation_min_period: int = Field(
        default=1, description="Minimum seconds between two random actions"
    )
    simulation_max_period: int = Field(
        default=5, description="Maximum seconds between two random actions"
    )

    # Hidden/Internal fields
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level")
    database_name: str = Field(default="todos", description="Database file name")
    data_dir: str = Field(
        default=".", description="Directory for storing the database file"
    )

    @field_validator("success_rate")
    @classmethod
    def validate_success_rate(cls, v):
        """Validate the success rate is a probability."""
        if not 0 <= v <= 1:
            raise PydanticCustomError(
                "invalid_success_rate",
                "Success rate must be between 0 and 1",
            )
        return v

    @field_validator("max_delay_ms", "simulation_min_period")
    @classmethod
    def validate_not_negative(cls, v, info):
        if v < 0:
            raise PydanticCustomError(
                "negative_value",
                "{field} must not be negative",
                {"field": info.field_name},
            )
        return v

    @field_validator("simulation_max_period")
    @classmethod
    def validate_simulation_period(cls, v, info):
        """Validate the maximum period is above the minimum period."""
        min_period = info.data.get("simulation_min_period")
        if min_period is not None and v <= min_period:
            raise PydanticCustomError(
                "invalid_period",
                "Maximum period must be greater than minimum period",
            )
        return v

    @classmethod
    def from_env_file(cls, env_path: str = ".env", validate: bool = True) -> "Settings":
        """Load settings from .env file if it exists.

        Args:
            env_path: Path to .env file
            validate: Whether to validate the settings
        """
        if not os.path.exists(env_path):
            if not validate:
                return cls.model_construct()
            raise FileNotFoundError(f".env file not found at {env_path}")

        # Load existing .env file into a dictionary
        env_values = dotenv_values(env_path)

        # Build settings from environment
        settings_dict = {}
        for field_name, field_info in cls.model_fields.items():
            env_name = field_name.upper()
            env_value: Optional[str] = env_values.get(env_name)
            if env_value is not None:
                # Convert to appropriate type
                if field_info.annotation is int:
                    settings_dict[field_name] = int(env_value)
                elif field_info.annotation is float:
                    settings_dict[field_name] = float(env_value)
                elif field_info.annotation is bool:
                    settings_dict[field_name] = env_value.lower() in (
                        "true",
                        "1",
                        "yes",
                        "on",
                    )
                else:
                    settings_dict[field_name] = env_value

        # Use model_construct to bypass validation if requested
        if not validate:
            return cls.model_construct(**settings_dict)

        return cls(**settings_dict)
