"""
Configuration management subsystem for SphereGrid.

Architecture
------------
- **config.py**: Static configuration from environment variables
- **manager.py**: Balance configuration from YAML files plus runtime overrides
- **errors.py**: Configuration exception hierarchy

Static vs Dynamic Configuration
--------------------------------
**Static (Config):**
- Loaded from environment variables at startup
- Includes: environment, logging, config/log directories

**Dynamic (ConfigManager):**
- Loaded from YAML defaults under ``Config.CONFIG_DIR``
- Includes: progression curve, rank ladder, XP economy, session guard timeouts
- Runtime overrides via ``ConfigManager.override``

Usage Examples
--------------
```python
from spheregrid.core.config import Config, ConfigManager

if Config.is_production():
    ...

ConfigManager.initialize()
growth = ConfigManager.get("progression.growth", 1.35)
```
"""

from spheregrid.core.config.config import Config, Environment
from spheregrid.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
)
from spheregrid.core.config.manager import ConfigManager

__all__ = [
    "Config",
    "Environment",
    "ConfigManager",
    "ConfigError",
    "ConfigValidationError",
    "ConfigInitializationError",
]
