"""Configuration values for fimcomplete.

Every value can be overridden through the environment variable named next to it.
"""

import os

# Debounce window in seconds; keystrokes closer together than this are coalesced
DEBOUNCE_WINDOW = float(os.environ.get("FIMCOMPLETE_DEBOUNCE_WINDOW", "0.35"))

# Buffers shorter than this never reach the inference server
MIN_PREFIX_LENGTH = int(os.environ.get("FIMCOMPLETE_MIN_PREFIX_LENGTH", "5"))

# Inference server (llama.cpp style /completion endpoint)
LLM_ENDPOINT = os.environ.get("FIMCOMPLETE_ENDPOINT", "http://127.0.0.1:8080/completion")
LLM_MODEL = os.environ.get("FIMCOMPLETE_MODEL", "LlaMA_CPP")
LLM_API_KEY = os.environ.get("FIMCOMPLETE_API_KEY", "no-key")

# Seconds to wait for the server; 0 disables the timeout
LLM_TIMEOUT = float(os.environ.get("FIMCOMPLETE_TIMEOUT", "30"))

# Fixed sampling parameters
LLM_TEMPERATURE = 0.1
LLM_MAX_NEW_TOKENS = 512
LLM_DO_SAMPLE = False

LOG_LEVEL = os.environ.get("FIMCOMPLETE_LOG_LEVEL", "INFO").upper()
