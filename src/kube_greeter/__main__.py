from kube_greeter.server import main

if __name__ == "__main__":
    # Run the service when called as a module
    main()
