# Register all blueprints here
def register_blueprints(app):
    from .auth import auth_bp
    from .health import health_bp
    from .rooms import rooms_bp
    from .tenants import tenants_bp
    from .payments import payments_bp
    from .utility_consumption import utility_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(rooms_bp)
    app.register_blueprint(tenants_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(utility_bp)
