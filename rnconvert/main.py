import argparse
import os

import uvicorn

from rnconvert.config import settings

APP_PATH = 'rnconvert.api.app:app'

def parse_args(argv=None) -> argparse.Namespace:
  parser = argparse.ArgumentParser(
    prog='rnconvert-server',
    description='Serve the React to React Native conversion API (archive download, manifest preview, snippet conversion).'
  )
  parser.add_argument('--host', default=settings.backend_host, help='Interface the conversion API binds to.')
  parser.add_argument('--port', default=settings.backend_port, type=int, help='Port for the conversion API.')
  parser.add_argument('--reload', action='store_true', help='Restart on source changes (development only).')
  parser.add_argument('--log-level', default=settings.log_level, help='Uvicorn log level.')
  parser.add_argument(
    '--max-concurrency',
    type=int,
    default=settings.max_concurrency,
    help='Files sent to the oracle at once per conversion run.'
  )
  args = parser.parse_args(argv)
  if args.max_concurrency < 1:
    parser.error('--max-concurrency must be at least 1')
  return args

def main(argv=None) -> None:
  args = parse_args(argv)
  # Read by Settings when the app module is imported, including reload workers.
  os.environ['CONVERTER_MAX_CONCURRENCY'] = str(args.max_concurrency)
  uvicorn.run(
    APP_PATH,
    host=args.host,
    port=args.port,
    log_level=args.log_level,
    reload=args.reload
  )

if __name__ == '__main__':
  main()
