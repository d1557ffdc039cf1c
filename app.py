"""
Scarlet - Blood Donation Coordination API
Flask entry point

    SCARLET_STORAGE=dynamodb FB_SERVICE_KEY=... python app.py
"""

from scarlet import create_app

app = create_app()

# ============== MAIN ==============

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'], host=app.config['HOST'], port=app.config['PORT'])
