from voxelworld.server.main import main

main()
