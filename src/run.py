# src/run.py

import os
from app import create_app

app = create_app()

if __name__ == "__main__":
	app.run(port=int(os.environ.get("PORT") or 5001), debug=bool(os.environ.get("FLASK_DEBUG")))
