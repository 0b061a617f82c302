"""Initialize scan-ci in a Salesforce repository."""

from pathlib import Path


WORKFLOW_TEMPLATE = '''name: SF(DX) Code Scan

on:
  pull_request:
    types: [opened, synchronize, reopened]
    paths:
      - "force-app/**"

permissions:
  contents: read
  checks: write

jobs:
  scan:
    name: Differential Code Scan
    runs-on: ubuntu-latest

    steps:
      - uses: actions/checkout@v4
        with:
          fetch-depth: 0

      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install tooling
        run: |
          pip install scan-ci
          npm install --global @salesforce/cli
          sf plugins install @salesforce/sfdx-scanner

      - name: Stage changed files
        run: scan-ci prepare

      - name: Scan changed files
        run: |
          for dir in modified-files-to-scan new-files-to-scan; do
            if [ -d "$dir" ]; then
              sf scanner run --target "$dir" --format json --normalize-severity \\
                --outfile "scan-results-$dir.json" || true
            fi
          done

      - name: Scan legacy files
        run: |
          if [ -d legacy-files-to-scan ]; then
            sf scanner run --target legacy-files-to-scan --format json --normalize-severity \\
              --outfile scan-results-legacy.json || true
          fi

      - name: Report
        env:
          SF_AUTH_URL: ${{ secrets.SF_AUTH_URL }}
        run: |
          for f in scan-results-modified-files-to-scan.json scan-results-new-files-to-scan.json; do
            [ -f "$f" ] && scan-ci report "$f"
          done
          if [ -f scan-results-legacy.json ]; then
            echo "$SF_AUTH_URL" > auth.txt && sf org login sfdx-url --sfdx-url-file auth.txt --set-default
            scan-ci report scan-results-legacy.json scan-results-legacy.csv
          fi
'''

MANIFEST_TEMPLATE = '''# Legacy files: one repository-relative path per line.
# Files listed here are scanned separately and reported as legacy code.
'''


def init_repository(target_dir: Path = None):
    """
    Initialize scan-ci in a repository.

    Creates:
      - .github/workflows/sfdx-scan.yml
      - .ci/legacy-files.txt
    """
    target = target_dir or Path.cwd()

    # Check if git repo
    if not (target / ".git").exists():
        print(f"Error: {target} is not a git repository")
        return False

    created_files = []

    for path, content in (
        (target / ".github" / "workflows" / "sfdx-scan.yml", WORKFLOW_TEMPLATE),
        (target / ".ci" / "legacy-files.txt", MANIFEST_TEMPLATE),
    ):
        if path.exists():
            print(f"Already exists: {path}")
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        print(f"Created: {path}")
        created_files.append(path)

    if created_files:
        print("\nNext steps:")
        print("  1. List legacy files in .ci/legacy-files.txt")
        print("  2. Add an SF_AUTH_URL secret for report uploads")
        print("  3. git add . && git commit -m 'Add SF(DX) code scan' && git push")
    else:
        print("\nAlready configured. No changes needed.")

    return True
