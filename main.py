import argparse

from src.registry.config import Settings
from src.registry.service import Registry
from web.app import create_app


def run_start(settings: Settings):
    registry = Registry(settings)
    scheduler = registry.scheduler()
    app = create_app(registry)

    scheduler.start()
    print(
        f'[RENDEZVOUS] Listening on {settings.host}:{settings.http_port} '
        f'(ttl={settings.initial_ttl}s, expire_period={settings.expire_period}s, '
        f'default_port={settings.default_port})'
    )
    try:
        app.run(host=settings.host, port=settings.http_port, threaded=True, debug=False)
    finally:
        scheduler.stop(timeout=1)


def parse_args(argv=None):
    try:
        env = Settings.from_env()
    except ValueError as exc:
        raise SystemExit(f'[RENDEZVOUS] Invalid environment: {exc}') from exc

    parser = argparse.ArgumentParser(description='Rendezvous registry - peer register/query service')
    sub = parser.add_subparsers(dest='command', required=False)

    p_start = sub.add_parser('start', help='Start the registry HTTP server')
    p_start.add_argument('--host', default=env.host)
    p_start.add_argument('--port', type=int, default=env.http_port, help='HTTP listen port')
    p_start.add_argument('--ttl', type=int, default=env.initial_ttl, help='Initial peer ttl in seconds (1-255)')
    p_start.add_argument('--expire-period', type=int, default=env.expire_period, help='Decay sweep period in seconds')
    p_start.add_argument('--default-port', type=int, default=env.default_port, help='Port stored when a peer declares none')
    p_start.add_argument('--trust-proxy', action='store_true', default=env.trust_proxy, help='Take caller IP from X-Forwarded-For')

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(['start'])
    return args


def main(argv=None):
    args = parse_args(argv)
    try:
        settings = Settings(
            host=args.host,
            http_port=args.port,
            default_port=args.default_port,
            initial_ttl=args.ttl,
            expire_period=args.expire_period,
            trust_proxy=args.trust_proxy,
        )
    except ValueError as exc:
        raise SystemExit(f'[RENDEZVOUS] Invalid configuration: {exc}') from exc
    run_start(settings)


if __name__ == '__main__':
    main()
