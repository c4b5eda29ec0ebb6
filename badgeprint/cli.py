# cli.py

import argparse
import logging
import os
import re
import sys
from typing import List, Optional

from badgeprint.app_service import AppService
from badgeprint.controller import apply_employee
from badgeprint.exceptions import BadgeError
from badgeprint.model import EmployeeResource
from badgeprint.roster import find_employee, load_roster

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '_', text.lower()).strip('_')
    return slug or 'card'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='badgeprint', description='ID card layout and rendering')
    parser.add_argument('templates', help='JSON file holding the saved templates')
    parser.add_argument('-t', '--template', help='Template name (default template if omitted)')
    parser.add_argument('-r', '--roster', help='Employee roster, CSV or Excel')
    parser.add_argument('--employee', help='Employee name to fill the card with')
    parser.add_argument('--images', dest='image_root', help='Directory that relative image references resolve under')
    parser.add_argument('-o', '--output', dest='outdir', help='Write <name>_front.png and <name>_back.png here')
    parser.add_argument('-e', '--export_pdf', dest='export_pdf', metavar='OUT.pdf', help='Export a print sheet')
    parser.add_argument('-p', '--page_size', choices=['letter', 'a4'], default='letter', dest='page_size',
                        help='PDF page size')
    parser.add_argument('--cards', dest='card_store', metavar='RECORDS.json', help='Save the rendered card here')
    parser.add_argument('--init', action='store_true', help='Store the default template under --template and exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def _report(service: AppService):
    for notice in service.notices:
        print(f"{notice.level}: {notice.message}", file=sys.stderr)


def run(args: argparse.Namespace) -> int:
    service = AppService(args.templates, args.card_store, args.image_root)

    if args.init:
        session = service.open_session()
        if args.template:
            session.template.name = args.template
        service.save_template(session)
        _report(service)
        return 1 if service.notices else 0

    session = service.open_session(args.template)
    template = session.template

    employees: List[EmployeeResource] = load_roster(args.roster) if args.roster else []
    employee: Optional[EmployeeResource] = None
    if args.employee:
        employee = find_employee(employees, args.employee)
        if employee is None:
            print(f"No employee matching '{args.employee}'", file=sys.stderr)
            return 1
        apply_employee(session, employee)

    if args.outdir:
        os.makedirs(args.outdir, exist_ok=True)
        front, back = service.render(template, employee)
        slug = slugify(employee.name if employee else template.name)
        for side, image in (('front', front), ('back', back)):
            path = os.path.join(args.outdir, f"{slug}_{side}.png")
            image.save(path)
            logger.info(f"cli.run: Wrote {path}")

    if args.card_store:
        service.save_card(template, employee)

    if args.export_pdf:
        if employee is not None:
            batch = [employee]
        else:
            batch = employees or [None]
        service.export_pdf(args.export_pdf, template, batch, args.page_size)

    _report(service)
    return 1 if any(n.level == 'error' for n in service.notices) else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')
    try:
        return run(args)
    except BadgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
