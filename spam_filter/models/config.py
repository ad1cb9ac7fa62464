"""Configuration for the spam filter engine."""

from typing import Any, Dict, List, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class FilterConfig(BaseSettings):
    """Configuration for the spam filter engine. Immutable once built."""
    
    # Decision Settings
    threshold: float = Field(default=80.0, ge=0.0, description="Reject when total spam score reaches this value")
    
    # Detector Toggles
    enable_p2wsh_detection: bool = Field(default=True, description="Run P2WSH fake multisig detection")
    enable_opreturn_detection: bool = Field(default=True, description="Run chained OP_RETURN detection")
    
    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json|text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = "SPAMFILTER_"
        frozen = True
    
    @validator('log_level')
    def validate_log_level(cls, v):
        """Validate that the log level is one the CLI understands."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
            raise ValueError(f"Unsupported log level: {v}")
        return level
    
    @validator('log_format')
    def validate_log_format(cls, v):
        """Validate log format."""
        fmt = v.lower()
        if fmt not in ('json', 'text'):
            raise ValueError(f"Log format must be 'json' or 'text', got {v}")
        return fmt
    
    def get_enabled_detectors(self) -> List[str]:
        """Get the names of the built-in detectors that will run."""
        enabled = []
        if self.enable_p2wsh_detection:
            enabled.append('p2wsh_fake_multisig')
        if self.enable_opreturn_detection:
            enabled.append('chained_op_return')
        return enabled
    
    def to_summary(self) -> Dict[str, Any]:
        """Get the decision-relevant settings as a dictionary."""
        return {
            'threshold': self.threshold,
            'enable_p2wsh_detection': self.enable_p2wsh_detection,
            'enable_opreturn_detection': self.enable_opreturn_detection,
        }
