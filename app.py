import os

from finance_tracker import create_app, db

app = create_app()


if __name__ == "__main__":
    with app.app_context():
        db.create_all()
    # one thread per request, so slow password hashing never stalls other clients
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1", threaded=True)
