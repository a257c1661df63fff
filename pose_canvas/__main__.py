import sys

from pose_canvas.app import main

sys.exit(main())
