# Import the application factory from our 'wanderlust' package
from wanderlust import create_app

# Create the Flask app instance using the factory
app = create_app()

if __name__ == '__main__':
    # Local development only; production imports 'app' from a WSGI server.
    print(f"App is listening on port {app.config['PORT']}")
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
