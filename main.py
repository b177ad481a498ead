"""Patient Portal - command-line client for the patient records API."""

from patient_portal.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
