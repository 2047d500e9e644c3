"""Entry point for 'python -m coddy_public'."""

from coddy_public.cli import main

if __name__ == "__main__":
    main()
