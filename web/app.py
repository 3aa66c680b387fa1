from flask import Flask, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix

from src.registry.errors import AddressResolutionFailure, InvalidArgument
from src.registry.service import Registry

QUERY_PARAMS = ('since', 'prefer', 'port', 'subnet4', 'subnet6')


def single_value(source, name: str):
    values = source.getlist(name)
    if len(values) > 1:
        raise InvalidArgument(f'Expected at most 1 {name}, got {len(values)}')
    return values[0] if values else None


def create_app(registry: Registry | None = None) -> Flask:
    registry = registry or Registry()

    app = Flask(__name__)
    app.config['REGISTRY'] = registry
    if registry.settings.trust_proxy:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1)

    @app.errorhandler(InvalidArgument)
    def invalid_argument(err):
        print(f'[ERROR {request.path}]: {err}')
        return jsonify({'error': str(err)}), 400

    @app.errorhandler(AddressResolutionFailure)
    def address_failure(err):
        print(f'[ERROR {request.path}]: {err}')
        return jsonify({'error': str(err)}), 500

    @app.route('/')
    def index():
        return 'Rendezvous Registry Online'

    @app.route('/register', methods=['GET', 'POST'])
    @app.route('/broadcast', methods=['GET', 'POST'])
    def register():
        port = single_value(request.values, 'port')
        return jsonify(registry.register(request.remote_addr, port))

    @app.route('/query', methods=['GET'])
    def query():
        params = {name: single_value(request.args, name) for name in QUERY_PARAMS}
        result = registry.query(
            timestamp_floor=params['since'],
            prefer_family=params['prefer'],
            port_filter=params['port'],
            subnet4=params['subnet4'],
            subnet6=params['subnet6'],
        )
        return jsonify(result)

    print(f'[HTTP] Routes ready: /register /broadcast /query (trust_proxy={registry.settings.trust_proxy})')
    return app
