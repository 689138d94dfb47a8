# run_dev.py
"""
Local development launcher for the webhook service.
Equivalent to: `uvicorn src.app:create_app_from_env --factory --reload --host 0.0.0.0 --port 8000`
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "src.app:create_app_from_env",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
