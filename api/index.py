"""
Serverless Function Entry Point

Exposes the FastAPI application to AWS Lambda / Vercel style hosts.
All API routes are handled by this single entry point. The WebSocket
channel needs a long-lived process and is only useful under uvicorn.
"""

import os
import sys
from pathlib import Path

# Ensure project root is in path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Serverless hosts talk to PostgreSQL when DATABASE_URL is set
if 'DATABASE_URL' in os.environ and 'USE_SQLITE' not in os.environ:
    os.environ['USE_SQLITE'] = '0'

from mangum import Mangum

from backend.main import create_app

app = create_app()

# Mangum adapter for AWS Lambda/Vercel
handler = Mangum(app, lifespan="off")
