import os
import importlib
import sys
from pathlib import Path

# Get the path to the root directory
root_dir = Path(__file__).parent.parent.parent


def test_env_var_loading_precedence(monkeypatch):
    """
    Test that environment variables are loaded with the correct precedence:
    .env file > system environment variables.
    """
    dot_env_path = root_dir / ".env"
    original_dot_env_content = None
    if dot_env_path.exists():
        with open(dot_env_path, "r") as f:
            original_dot_env_content = f.read()

    common_module = sys.modules["common.global_config"]

    try:
        monkeypatch.setenv("DEV_ENV", "system")
        monkeypatch.setenv("GEMINI_API_KEY", "system_gemini_key")
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "system_unsplash_key")
        # Also present in the .env file below, which should win
        monkeypatch.setenv("WEBHOOK_SECRET", "system_webhook_secret")

        dot_env_content = "DEV_ENV=dotenv\nWEBHOOK_SECRET=dotenv_webhook_secret\n"
        with open(dot_env_path, "w") as f:
            f.write(dot_env_content)

        importlib.reload(common_module)
        reloaded_config = common_module.global_config  # type: ignore

        assert reloaded_config.DEV_ENV == "dotenv", "Should load from .env first"
        assert (
            reloaded_config.WEBHOOK_SECRET == "dotenv_webhook_secret"
        ), "Should load from .env"
        assert (
            reloaded_config.UNSPLASH_ACCESS_KEY == "system_unsplash_key"
        ), "Should fall back to system env"
        assert reloaded_config.llm_api_key("gemini/gemini-2.0-flash") == (
            "system_gemini_key"
        )

    finally:
        # Clean up and restore the original .env file if it existed
        if original_dot_env_content is not None:
            with open(dot_env_path, "w") as f:
                f.write(original_dot_env_content)
        else:
            if os.path.exists(dot_env_path):
                os.remove(dot_env_path)

        monkeypatch.undo()
        # Reload the original config to avoid side effects on other tests
        importlib.reload(common_module)
