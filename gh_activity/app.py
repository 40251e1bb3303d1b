"""Flask web backend for the activity stats service"""

from datetime import datetime, timezone
from flask import Flask, jsonify
from dotenv import load_dotenv

from gh_activity.api import github_bp

load_dotenv()


def create_app() -> Flask:
    """Create the Flask app with all API blueprints registered"""
    app = Flask(__name__)
    app.register_blueprint(github_bp)

    @app.route("/api/health")
    def health_check():
        """Health check endpoint"""
        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True, port=5000)
