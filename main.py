# Nuitka project options for reproducible builds
#
# nuitka-project: --standalone
#
# nuitka-project: --enable-plugin=pyside6
# nuitka-project: --include-qt-plugins=sensible,styles
#
# Keep the test suite out of the bundle
# nuitka-project: --follow-imports
# nuitka-project: --nofollow-import-to=tests
#
# nuitka-project: --output-dir=dist
# nuitka-project: --remove-output
#
# Non-Python data files, relative to the main script
# nuitka-project: --include-data-files={MAIN_DIRECTORY}/ui/theme/dark.qss=ui/theme/dark.qss
#
# nuitka-project-if: {OS} == "Windows":
#    nuitka-project: --windows-console-mode=disable

"""Application entry point for the file analyzer desktop client."""

from app import run


if __name__ == "__main__":
    run()
