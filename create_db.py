from wanderlust import create_app, db


def setup_database():
    """
    Creates all tables (users, listings, reviews, sessions).
    Run once before starting the application for the first time.
    """
    app = create_app()

    with app.app_context():
        print(f"Creating tables in {db.engine.url.render_as_string(hide_password=True)}...")
        db.create_all()
        print("Database tables created successfully.")


if __name__ == "__main__":
    setup_database()
