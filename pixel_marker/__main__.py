from pixel_marker.cli import main

main()
