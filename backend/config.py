"""
Environment configuration for the process tree converter.
Values come from the process environment or a local .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Key used for a process that is not itself bound to an operation
PROCESS_ROOT_KEY = os.getenv("PROCESS_ROOT_KEY", "Process")

# Node attribute naming the executable behavior (rpa:operation in BPMN files)
PROCESS_OPERATION_ATTRIBUTE = os.getenv("PROCESS_OPERATION_ATTRIBUTE", "operation")

# Raise on split branches that dead-end instead of ignoring them
PROCESS_STRICT_JOINS = _env_flag("PROCESS_STRICT_JOINS", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))
