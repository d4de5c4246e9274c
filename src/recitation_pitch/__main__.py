from recitation_pitch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
