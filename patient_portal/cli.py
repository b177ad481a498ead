"""Command-line entry point."""

import argparse
import asyncio
import getpass
import sys
from typing import List, Optional

from patient_portal.main import DASHBOARD_ROUTE, PortalApp
from patient_portal.shared.exceptions import PortalException


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="patient-portal", description="Patient records client")
    commands = parser.add_subparsers(dest="command", required=True)
    
    login = commands.add_parser("login", help="Sign in and store the session")
    login.add_argument("--email", required=True)
    login.add_argument("--password", help="Prompted for when omitted")
    
    commands.add_parser("logout", help="Forget the stored session")
    commands.add_parser("whoami", help="Show the signed-in user")
    commands.add_parser("list", help="List patients")
    commands.add_parser("health", help="Check the API server")
    
    add = commands.add_parser("add", help="Add a patient")
    add.add_argument("--name", required=True)
    add.add_argument("--age", type=int, required=True)
    add.add_argument("--gender", choices=["Male", "Female", "Other"], required=True)
    add.add_argument("--history", action="append", default=[], help="Medical history entry (repeatable)")
    add.add_argument("--allergy", action="append", default=[], help="Allergy (repeatable)")
    add.add_argument("--medication", action="append", default=[], help="Medication (repeatable)")
    
    delete = commands.add_parser("delete", help="Delete a patient")
    delete.add_argument("id", type=int)
    delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    
    return parser


def _confirm_delete(patient_id: int) -> bool:
    answer = input(f"Are you sure you want to delete patient {patient_id}? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def run(args: argparse.Namespace) -> int:
    async with PortalApp() as app:
        if args.command == "health":
            health = await app.patients.health()
            print(f"{health.status} ({health.timestamp})")
            return 0
        
        if args.command == "login":
            password = args.password or getpass.getpass("Password: ")
            user = await app.login(args.email, password)
            print(f"Signed in as {user.name} <{user.email}>")
            return 0
        
        if args.command == "logout":
            app.logout()
            print("Signed out")
            return 0
        
        if app.navigate(DASHBOARD_ROUTE) != DASHBOARD_ROUTE:
            print("Not signed in. Run `patient-portal login` first.", file=sys.stderr)
            return 1
        await app.auth.wait_until_ready()
        if not app.session.is_authenticated:
            print("Session expired. Please sign in again.", file=sys.stderr)
            return 1
        
        if args.command == "whoami":
            user = app.session.user
            print(f"{user.name} <{user.email}> ({user.role})")
            return 0
        
        dashboard = app.dashboard
        if not await dashboard.load_all():
            print(dashboard.error or "Could not load patients", file=sys.stderr)
            return 1
        
        if args.command == "list":
            stats = dashboard.stats()
            for patient in dashboard.patients:
                print(f"{patient.id:>5}  {patient.name:<30} {patient.age:>3}  {patient.gender}")
            print(f"Total: {stats.total} (male {stats.male}, female {stats.female}, other {stats.other})")
            return 0
        
        if args.command == "add":
            patient = await dashboard.add({
                "name": args.name,
                "age": args.age,
                "gender": args.gender,
                "medical_history": args.history,
                "allergies": args.allergy,
                "medications": args.medication,
            })
            if patient is None:
                print(dashboard.error, file=sys.stderr)
                return 1
            print(f"Added patient {patient.id}")
            return 0
        
        if args.command == "delete":
            deleted = await dashboard.remove(args.id, True if args.yes else _confirm_delete)
            if not deleted:
                if dashboard.error:
                    print(dashboard.error, file=sys.stderr)
                return 1
            print(f"Deleted patient {args.id}")
            return 0
    
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except PortalException as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        return 1
