import os
import sys

import uvicorn

if __name__ == "__main__":
    # --dev switches the bot to DISCORD_TOKEN_DEV (read by Settings)
    if "--dev" in sys.argv:
        os.environ["DEV_MODE"] = "true"

    # Imported after DEV_MODE is set so the cached Settings see it
    from stiggy.core.config import get_settings

    # Single worker: handlers are async and the Supabase client is a
    # process-level singleton.
    uvicorn.run(
        "stiggy.main:app",
        host="0.0.0.0",
        port=get_settings().port,
        workers=1,
    )
