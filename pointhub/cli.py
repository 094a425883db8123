#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PointHub local data store (SQLite)

Commands:
  where               Print the resolved data directory and database path
  init                Create/patch the schema and seed the demo class on first run
  import-students     Import a student roster CSV (学号, 学生姓名, 积分) into a class
  import-products     Import a product catalog CSV (商品名称, 所需积分, 库存数量) into a class
  export-students     Write a class roster CSV (to --out, or to the desktop)
  serve               Run the HTTP API the UI shell talks to

Notes:
- The database path comes from POINTHUB_DB_PATH, then config.yaml `db_path`,
  then the first candidate data directory whose parent exists.
"""

import argparse
import logging
import os
import sys

from pointhub.db import get_db_path, open_store, resolve_data_dir
from pointhub.errors import StorageError, StoreError
from pointhub.logs import LogContext


def cmd_where(args):
    print("data_dir:", resolve_data_dir())
    print("db_path: ", get_db_path())


def cmd_init(args):
    store = open_store(args.db, seed=not args.no_seed)
    try:
        print("DB initialized:", store.db_path)
    finally:
        store.close()


def _run_import(args, action: str, fn):
    store = open_store(args.db, seed=False)
    try:
        log = LogContext(action, user="cli")
        log.set_payload({"class_id": args.class_id, "file": args.file})
        res = fn(store, args.class_id, args.file, log)
        log.write(store, "OK")
        print({"message": "ok", **res})
    finally:
        store.close()


def cmd_import_students(args):
    from pointhub.services.seed_svc import import_students_csv
    _run_import(args, "IMPORT_STUDENTS", import_students_csv)


def cmd_import_products(args):
    from pointhub.services.seed_svc import import_products_csv
    _run_import(args, "IMPORT_PRODUCTS", import_products_csv)


def cmd_export_students(args):
    from pointhub.services.export_svc import export_students_csv, save_file_to_desktop

    store = open_store(args.db, seed=False)
    try:
        data = export_students_csv(store, args.class_id)
    finally:
        store.close()
    if args.out:
        try:
            with open(args.out, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"文件保存失败: {e}") from e
        print("written:", args.out)
    else:
        print("written:", save_file_to_desktop(f"students_{args.class_id}.csv", data))


def cmd_serve(args):
    import uvicorn
    # app 在 uvicorn 内按路径导入，--db 通过环境变量传给 get_db_path()
    if args.db:
        os.environ["POINTHUB_DB_PATH"] = args.db
    uvicorn.run("pointhub.api:app", host=args.host, port=args.port)


def main(argv=None):
    parser = argparse.ArgumentParser(description="PointHub local data store (SQLite)")
    parser.add_argument("--db", default=None, help="database file (default: resolved path)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_where = sub.add_parser("where", help="print resolved storage location")
    p_where.set_defaults(func=cmd_where)

    p_init = sub.add_parser("init", help="init db and seed demo data")
    p_init.add_argument("--no-seed", action="store_true")
    p_init.set_defaults(func=cmd_init)

    p_is = sub.add_parser("import-students", help="import a roster CSV")
    p_is.add_argument("--class-id", required=True)
    p_is.add_argument("--file", required=True)
    p_is.set_defaults(func=cmd_import_students)

    p_ip = sub.add_parser("import-products", help="import a product catalog CSV")
    p_ip.add_argument("--class-id", required=True)
    p_ip.add_argument("--file", required=True)
    p_ip.set_defaults(func=cmd_import_products)

    p_es = sub.add_parser("export-students", help="export a class roster CSV")
    p_es.add_argument("--class-id", required=True)
    p_es.add_argument("--out", default=None)
    p_es.set_defaults(func=cmd_export_students)

    p_srv = sub.add_parser("serve", help="run the HTTP API")
    p_srv.add_argument("--host", default="127.0.0.1")
    p_srv.add_argument("--port", type=int, default=8000)
    p_srv.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    try:
        args.func(args)
    except StoreError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
