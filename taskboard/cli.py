import argparse
import asyncio
import logging
import sys

from .board import BoardView
from .client import TaskApiClient
from .config import Config
from .drag import DragController
from .models import COLUMN_IDS, TODO
from .store import BoardStore, MoveState

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog='taskboard', description='Kanban task board')
    parser.add_argument('--api-url', help='Task API base URL (default: $TASKBOARD_API_URL)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the development server')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=5000)
    serve.add_argument('--debug', action='store_true')

    init_db = sub.add_parser('init-db', help='Create the database tables')
    init_db.add_argument('--reset', action='store_true', help='Drop the tasks table first')
    init_db.add_argument('--seed', action='store_true', help='Insert sample tasks')

    sub.add_parser('board', help='Show the board')

    add = sub.add_parser('add', help='Create a task')
    add.add_argument('title')
    add.add_argument('-d', '--description', default='')
    add.add_argument('-c', '--column', default=TODO, choices=COLUMN_IDS)

    edit = sub.add_parser('edit', help="Change a task's title and description")
    edit.add_argument('id')
    edit.add_argument('title')
    edit.add_argument('-d', '--description', help='Defaults to the current description')

    rm = sub.add_parser('rm', help='Delete a task')
    rm.add_argument('id')

    move = sub.add_parser('move', help='Drop a task on a column')
    move.add_argument('id')
    move.add_argument('target', help='Column id; anything else is ignored')
    return parser


async def run_client(args, config, transport=None):
    async with TaskApiClient(config.api_url, config.request_timeout, transport=transport) as api:
        store = BoardStore(api)
        view = BoardView(store)
        await store.fetch_all()
        if store.error:
            print(f"Error: {store.error}", file=sys.stderr)
            return 1

        if args.command == 'add':
            await store.create(args.title, args.description, args.column)
        elif args.command == 'edit':
            description = args.description
            if description is None:
                task = store.get_task(args.id)
                description = task.description if task else ''
            await store.update(args.id, args.title, description)
        elif args.command == 'rm':
            await store.remove(args.id)
        elif args.command == 'move':
            operation = DragController(store).drag_end(args.id, args.target)
            if operation is None:
                print(f"Ignored: {args.target} is not a column", file=sys.stderr)
            else:
                await operation
                if operation.state is MoveState.ROLLED_BACK:
                    print(f"Move rolled back: {operation.error}", file=sys.stderr)

        print(view.render_text())
        view.close()
        return 1 if store.error else 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    if args.api_url:
        config.api_url = args.api_url

    # Configure logging
    logging.basicConfig(level=config.log_level)

    if args.command == 'serve':
        from .app import create_app
        create_app(config).run(host=args.host, port=args.port, debug=args.debug)
        return 0

    if args.command == 'init-db':
        from .db import create_pool, init_db
        db_pool = create_pool(config)
        try:
            init_db(db_pool, reset=args.reset, seed=args.seed)
        finally:
            db_pool.closeall()
        return 0

    return asyncio.run(run_client(args, config))


if __name__ == '__main__':
    sys.exit(main())
