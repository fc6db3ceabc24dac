# Repository root conftest: puts packetrate, common and bin on sys.path for pytest.
