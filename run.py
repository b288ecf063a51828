import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from studymate import create_app
from studymate.config import Config

cfg = Config(os.getcwd())
app = create_app(cfg)

if __name__ == '__main__':
    port = int(os.environ.get("PORT", cfg.PORT))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get("FLASK_DEBUG") == "1", use_reloader=False)
